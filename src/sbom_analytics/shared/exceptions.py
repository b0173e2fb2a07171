"""
Custom exception hierarchy for SBOM analytics.
"""

import json
from typing import Any


class SbomAnalyticsError(Exception):
    """Base exception for all SBOM analytics errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        """Initialize with message and optional context.

        Args:
            message: Error message
            context: Additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """String representation with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


# SBOM document exceptions
class SBOMError(SbomAnalyticsError):
    """Base exception for SBOM document problems."""

    pass


class InvalidDocumentError(SBOMError):
    """The input is not an SBOM-shaped object at all."""

    pass


class DocumentLoadError(SBOMError):
    """An SBOM file could not be read or decoded."""

    pass


# Analysis exceptions
class AnalysisError(SbomAnalyticsError):
    """Base exception for analysis runs."""

    pass


class AnalysisCancelledError(AnalysisError):
    """A recompute was abandoned because newer input superseded it."""

    pass


class AnalysisFailedError(AnalysisError):
    """An unexpected error terminated a recompute."""

    pass


# Diagram exceptions
class DiagramError(SbomAnalyticsError):
    """Invalid diagram build options."""

    pass


# Utility functions for error handling
def wrap_external_error(
    error: Exception, context: dict[str, Any] | None = None
) -> SbomAnalyticsError:
    """Wrap external exceptions in our custom exception hierarchy.

    Args:
        error: External exception to wrap
        context: Additional context information

    Returns:
        Appropriate SbomAnalyticsError subclass
    """
    error_message = str(error)
    error_context = context or {}
    error_context["original_error"] = type(error).__name__

    if isinstance(error, json.JSONDecodeError):
        return DocumentLoadError(f"Invalid JSON: {error_message}", error_context)

    elif isinstance(error, FileNotFoundError):
        return DocumentLoadError(f"File not found: {error_message}", error_context)

    elif isinstance(error, PermissionError):
        return DocumentLoadError(f"Permission denied: {error_message}", error_context)

    elif isinstance(error, ValueError | TypeError):
        return SbomAnalyticsError(f"Data validation error: {error_message}", error_context)

    else:
        return AnalysisFailedError(f"Unexpected error: {error_message}", error_context)


def create_error_context(**kwargs) -> dict[str, Any]:
    """Create error context dictionary with standardized keys.

    Args:
        **kwargs: Context key-value pairs

    Returns:
        Context dictionary
    """
    context = {}

    for key, value in kwargs.items():
        if value is not None:
            context[key] = value

    return context
