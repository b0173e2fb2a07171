"""
Shared module for core functionality.

Contains the typed records, the collection canonicalizer, exceptions,
logging and cooperative-yielding helpers used across the package.
"""

from .async_utils import Checkpoint, batch_process, tick
from .collections import as_list, canonicalize_document, normalize_severity, ref_value
from .exceptions import (
    AnalysisCancelledError,
    AnalysisError,
    AnalysisFailedError,
    DiagramError,
    DocumentLoadError,
    InvalidDocumentError,
    SBOMError,
    SbomAnalyticsError,
    create_error_context,
    wrap_external_error,
)
from .logging import ProgressLogger, get_logger, setup_logging
from .models import (
    AnalysisConfig,
    Component,
    DependencyRecord,
    DiagramOptions,
    Finding,
    License,
    LicenseCategory,
    Rating,
    SbomDocument,
    SeverityLevel,
)

__all__ = [
    # Core models
    "AnalysisConfig",
    "Component",
    "DependencyRecord",
    "DiagramOptions",
    "Finding",
    "License",
    "LicenseCategory",
    "Rating",
    "SbomDocument",
    "SeverityLevel",
    # Canonicalizer
    "as_list",
    "canonicalize_document",
    "normalize_severity",
    "ref_value",
    # Core exceptions
    "SbomAnalyticsError",
    "SBOMError",
    "InvalidDocumentError",
    "DocumentLoadError",
    "AnalysisError",
    "AnalysisCancelledError",
    "AnalysisFailedError",
    "DiagramError",
    "wrap_external_error",
    "create_error_context",
    # Logging
    "setup_logging",
    "get_logger",
    "ProgressLogger",
    # Cooperative yielding
    "Checkpoint",
    "batch_process",
    "tick",
]
