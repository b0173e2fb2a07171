"""
Developer insights: version conflicts and metadata completeness.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..shared.models import Component, SbomDocument

logger = logging.getLogger(__name__)

METADATA_WEIGHTS: dict[str, int] = {
    "purl": 20,
    "hashes": 15,
    "licenses": 20,
    "supplier": 15,
    "properties": 10,
    "tools": 10,
    "dependencies": 10,
}

# Minimum score for each grade, best grade first; anything lower is a D
GRADE_THRESHOLDS: tuple[tuple[str, int], ...] = (("A", 70), ("B", 55), ("C", 40))

STANDARD_THRESHOLD = 0.5
LENIENT_THRESHOLD = 0.1


@dataclass
class VersionConflict:
    """Several versions of the same component name in one SBOM."""

    name: str
    versions: list[str] = field(default_factory=list)
    affected_refs: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "versions": self.versions, "affected_refs": self.affected_refs}


@dataclass
class MetadataQuality:
    checks: dict[str, bool] = field(default_factory=dict)
    score: int = 0
    grade: str = "D"

    def to_dict(self) -> dict[str, Any]:
        return {"checks": dict(self.checks), "score": self.score, "grade": self.grade}


@dataclass
class DeveloperStats:
    version_conflicts: list[VersionConflict] = field(default_factory=list)
    metadata_quality: MetadataQuality = field(default_factory=MetadataQuality)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version_conflicts": [conflict.to_dict() for conflict in self.version_conflicts],
            "metadata_quality": self.metadata_quality.to_dict(),
        }


def find_version_conflicts(components: list[Component]) -> list[VersionConflict]:
    """Group components by name and report names with two or more versions.

    Args:
        components: Components to inspect

    Returns:
        Conflicts, most fragmented name first
    """
    groups: dict[str, VersionConflict] = {}
    for component in components:
        if not component.name or not component.version:
            continue
        conflict = groups.setdefault(component.name, VersionConflict(name=component.name))
        if component.version not in conflict.versions:
            conflict.versions.append(component.version)
        ref = component.identity
        if ref and ref not in conflict.affected_refs:
            conflict.affected_refs.append(ref)

    conflicts = [conflict for conflict in groups.values() if len(conflict.versions) >= 2]
    # Stable sort keeps first-seen order between equally fragmented names
    conflicts.sort(key=lambda conflict: len(conflict.versions), reverse=True)
    return conflicts


def grade_for_score(score: int) -> str:
    for grade, minimum in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return "D"


class DeveloperInsightsAnalyzer:
    """Computes version conflicts and the metadata quality grade."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def metadata_quality(
        self, document: SbomDocument, components: list[Component]
    ) -> MetadataQuality:
        """Score how completely the SBOM describes its components.

        Per-component fields pass on coverage: ``purl`` and ``licenses`` need
        more than half of the components, while ``hashes``, ``supplier`` and
        ``properties`` pass above 10% or on any single occurrence.
        ``tools`` and ``dependencies`` are document-level presence checks.
        """
        total = len(components)

        def coverage(has_field) -> tuple[int, float]:
            count = sum(1 for component in components if has_field(component))
            return count, (count / total if total else 0.0)

        def standard(has_field) -> bool:
            _, ratio = coverage(has_field)
            return ratio > STANDARD_THRESHOLD

        def lenient(has_field) -> bool:
            count, ratio = coverage(has_field)
            return ratio > LENIENT_THRESHOLD or count > 0

        checks = {
            "purl": standard(lambda c: bool(c.purl)),
            "hashes": lenient(lambda c: bool(c.hashes)),
            "licenses": standard(lambda c: bool(c.licenses)),
            "supplier": lenient(lambda c: c.supplier is not None),
            "properties": lenient(lambda c: bool(c.properties)),
            "tools": bool(document.tools),
            "dependencies": bool(document.dependencies),
        }
        score = sum(METADATA_WEIGHTS[name] for name, passed in checks.items() if passed)
        return MetadataQuality(checks=checks, score=score, grade=grade_for_score(score))

    def analyze(self, document: SbomDocument, components: list[Component]) -> DeveloperStats:
        """Compute developer insights for the given components."""
        conflicts = find_version_conflicts(components)
        quality = self.metadata_quality(document, components)
        self.logger.debug(
            f"Developer insights: {len(conflicts)} version conflicts, "
            f"metadata grade {quality.grade} ({quality.score}/100)"
        )
        return DeveloperStats(version_conflicts=conflicts, metadata_quality=quality)
