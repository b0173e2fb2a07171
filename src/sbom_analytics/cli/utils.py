"""
File helpers shared by the CLI commands.
"""

import json
from pathlib import Path
from typing import Any

from ..shared.exceptions import DocumentLoadError, create_error_context, wrap_external_error


def load_sbom_json(path: Path) -> dict[str, Any]:
    """Read and decode an SBOM JSON file.

    Args:
        path: Path to a CycloneDX JSON document

    Returns:
        Decoded JSON object

    Raises:
        DocumentLoadError: If the file cannot be read, is not JSON, or is not an object
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        error = wrap_external_error(e, create_error_context(path=str(path)))
        if isinstance(error, DocumentLoadError):
            raise error from e
        raise DocumentLoadError(f"Could not read {path}: {e}", error.context) from e

    if not isinstance(data, dict):
        raise DocumentLoadError(
            "SBOM file must contain a JSON object",
            create_error_context(path=str(path), received_type=type(data).__name__),
        )
    return data


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
