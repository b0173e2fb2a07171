"""
Pytest configuration and shared fixtures for SBOM analytics tests.
"""

import json
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from sbom_analytics.analysis.graph_builder import DependencyGraph, GraphBuilder
from sbom_analytics.shared.collections import canonicalize_document
from sbom_analytics.shared.models import SbomDocument


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_sbom_data() -> dict[str, Any]:
    """Return a small CycloneDX SBOM: an app using requests and its dependencies.

    Dependency tree (app is the metadata root, not a component)::

        app -> requests -> urllib3, certifi, idna, charset-normalizer
    """
    return {
        "bomFormat": "CycloneDX",
        "specVersion": "1.5",
        "serialNumber": "urn:uuid:test-1234",
        "version": 1,
        "metadata": {
            "timestamp": "2024-01-01T00:00:00Z",
            "tools": [{"name": "test-tool", "version": "1.0.0"}],
            "component": {
                "bom-ref": "app",
                "type": "application",
                "name": "demo-app",
                "version": "1.0.0",
            },
        },
        "components": [
            {
                "bom-ref": "pkg:pypi/requests@2.31.0",
                "type": "library",
                "name": "requests",
                "version": "2.31.0",
                "purl": "pkg:pypi/requests@2.31.0",
                "licenses": [{"license": {"id": "Apache-2.0"}}],
            },
            {
                "bom-ref": "pkg:pypi/urllib3@2.0.0",
                "type": "library",
                "name": "urllib3",
                "version": "2.0.0",
                "purl": "pkg:pypi/urllib3@2.0.0",
                "licenses": [{"license": {"id": "MIT"}}],
            },
            {
                "bom-ref": "pkg:pypi/certifi@2023.7.22",
                "type": "library",
                "name": "certifi",
                "version": "2023.7.22",
                "purl": "pkg:pypi/certifi@2023.7.22",
                "licenses": [{"license": {"id": "MPL-2.0"}}],
            },
            {
                "bom-ref": "pkg:pypi/idna@3.4",
                "type": "library",
                "name": "idna",
                "version": "3.4",
                "purl": "pkg:pypi/idna@3.4",
                "licenses": [{"license": {"id": "BSD-3-Clause"}}],
            },
            {
                "bom-ref": "pkg:pypi/charset-normalizer@3.2.0",
                "type": "library",
                "name": "charset-normalizer",
                "version": "3.2.0",
                "purl": "pkg:pypi/charset-normalizer@3.2.0",
            },
        ],
        "dependencies": [
            {"ref": "app", "dependsOn": ["pkg:pypi/requests@2.31.0"]},
            {
                "ref": "pkg:pypi/requests@2.31.0",
                "dependsOn": [
                    "pkg:pypi/urllib3@2.0.0",
                    "pkg:pypi/certifi@2023.7.22",
                    "pkg:pypi/idna@3.4",
                    "pkg:pypi/charset-normalizer@3.2.0",
                ],
            },
        ],
        "vulnerabilities": [
            {
                "id": "CVE-2023-32681",
                "description": "Proxy-Authorization header leak",
                "ratings": [{"severity": "medium", "score": 6.1, "method": "CVSSv31"}],
                "affects": [{"ref": "pkg:pypi/requests@2.31.0"}],
                "cwes": [200],
                "source": {"name": "NVD"},
            },
            {
                "id": "CVE-2023-43804",
                "description": "Cookie header not stripped on redirect",
                "ratings": [{"severity": "high"}, {"severity": "medium"}],
                "affects": [{"ref": "pkg:pypi/urllib3@2.0.0"}],
                "cwes": [200],
                "source": {"name": "GitHub"},
            },
            {
                "id": "CVE-2023-45803",
                "ratings": [{"severity": "MEDIUM"}],
                "affects": [{"ref": "pkg:pypi/urllib3@2.0.0"}],
            },
            {
                "id": "GHSA-xqr8-7jwr-rhp7",
                "ratings": [{"severity": "critical", "score": 9.8}],
                "affects": [{"ref": "pkg:pypi/certifi@2023.7.22"}],
                "cwes": [345],
                "source": {"name": "NVD"},
            },
        ],
    }


@pytest.fixture
def sample_sbom_file(temp_dir: Path, sample_sbom_data: dict[str, Any]) -> Path:
    """Create a sample SBOM file and return its path."""
    sbom_path = temp_dir / "test_sbom.json"
    with open(sbom_path, "w") as f:
        json.dump(sample_sbom_data, f)
    return sbom_path


@pytest.fixture
def sample_document(sample_sbom_data: dict[str, Any]) -> SbomDocument:
    """Return the sample SBOM canonicalized."""
    return canonicalize_document(sample_sbom_data)


@pytest.fixture
def sample_graph(sample_document: SbomDocument) -> DependencyGraph:
    """Return the dependency graph of the sample SBOM."""
    return GraphBuilder().build(sample_document)


@pytest.fixture
def cyclic_sbom_data() -> dict[str, Any]:
    """Return an SBOM with a dependency cycle b <-> c below a (legacy per-component edges)."""
    return {
        "components": [
            {"bom-ref": "a", "name": "a", "version": "1.0.0", "dependencies": ["b"]},
            {"bom-ref": "b", "name": "b", "version": "1.0.0", "dependencies": ["c"]},
            {"bom-ref": "c", "name": "c", "version": "1.0.0", "dependencies": ["b"]},
        ],
        "vulnerabilities": [
            {"id": "CVE-B", "ratings": [{"severity": "high"}], "affects": [{"ref": "b"}]},
            {"id": "CVE-C", "ratings": [{"severity": "low"}], "affects": [{"ref": "c"}]},
        ],
    }


@pytest.fixture
def make_sbom() -> Callable[..., dict[str, Any]]:
    """Return a factory building minimal SBOMs from an adjacency map."""

    def factory(edges: dict[str, list[str]], **extra: Any) -> dict[str, Any]:
        refs = list(dict.fromkeys([*edges, *(c for children in edges.values() for c in children)]))
        document = {
            "components": [{"bom-ref": ref, "name": ref, "version": "1.0.0"} for ref in refs],
            "dependencies": [
                {"ref": ref, "dependsOn": children} for ref, children in edges.items()
            ],
        }
        document.update(extra)
        return document

    return factory
