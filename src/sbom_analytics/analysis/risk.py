"""
Vulnerability and license aggregation.

Findings are merged by id and resolved to their single most severe rating
before counting. Each (finding, component) pair then increments exactly one
severity bucket, globally and in the component's own tally.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from ..shared.async_utils import Checkpoint, batch_process
from ..shared.collections import normalize_severity
from ..shared.models import (
    SEVERITY_ORDER,
    Component,
    Finding,
    LicenseCategory,
    ResolvedFinding,
    SeverityLevel,
    empty_license_distribution,
)
from .licenses import license_category


@dataclass
class SeverityTally:
    """Per-component count of findings by resolved severity."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0
    total: int = 0

    def add(self, severity: SeverityLevel) -> None:
        setattr(self, severity.value, getattr(self, severity.value) + 1)
        self.total += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "none": self.none,
            "total": self.total,
        }


@dataclass
class LicenseSummary:
    """One license and the components that declare it."""

    id: str
    name: str
    category: LicenseCategory
    affected_refs: dict[str, None] = field(default_factory=dict)

    @property
    def affected_count(self) -> int:
        return len(self.affected_refs)


@dataclass
class RiskProfile:
    """Everything the aggregator derives from findings and licenses."""

    severity_counts: dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in SEVERITY_ORDER}
    )
    findings: dict[str, ResolvedFinding] = field(default_factory=dict)
    findings_by_ref: dict[str, list[ResolvedFinding]] = field(default_factory=dict)
    component_tallies: dict[str, SeverityTally] = field(default_factory=dict)
    license_counts: Counter = field(default_factory=Counter)
    license_summaries: dict[str, LicenseSummary] = field(default_factory=dict)
    component_licenses: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    license_distribution: dict[str, int] = field(default_factory=empty_license_distribution)
    cwe_counts: Counter = field(default_factory=Counter)
    source_counts: Counter = field(default_factory=Counter)

    def affected_count(self, finding_id: str) -> int:
        """Number of distinct components a finding affects."""
        resolved = self.findings.get(finding_id)
        return len(resolved.affected_refs) if resolved else 0

    def top_licenses(self, limit: int = 5) -> list[dict[str, Any]]:
        return [
            {"name": name, "count": count} for name, count in self.license_counts.most_common(limit)
        ]

    @property
    def total_occurrences(self) -> int:
        """Rated (finding, component) occurrences; ``none`` is excluded."""
        return sum(self.severity_counts[level.value] for level in SEVERITY_ORDER[:4])


def resolve_severity(finding: Finding) -> SeverityLevel:
    """Most severe rating of a finding; ``none`` when it has no usable rating."""
    resolved = SeverityLevel.NONE
    for rating in finding.ratings:
        severity = normalize_severity(rating.severity)
        if severity.rank < resolved.rank:
            resolved = severity
    return resolved


class RiskAggregator:
    """Aggregates findings and licenses for one SBOM snapshot."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._profile = RiskProfile()
        self._merged: dict[str, ResolvedFinding] = {}

    def _group_finding(self, finding: Finding, index: int) -> None:
        """Merge a raw finding into the group sharing its id."""
        key = finding.id or f"unknown#{index}"
        severity = resolve_severity(finding)
        group = self._merged.get(key)
        if group is None:
            self._merged[key] = ResolvedFinding(
                key=key,
                id=finding.id or "Unknown",
                severity=severity,
                finding=finding,
                affected_refs=finding.affected_refs,
            )
            return

        if severity.rank < group.severity.rank:
            group.severity = severity
        merged_refs = dict.fromkeys(group.affected_refs)
        merged_refs.update(dict.fromkeys(finding.affected_refs))
        group.affected_refs = list(merged_refs)

    def _count_finding(self, resolved: ResolvedFinding, _index: int = 0) -> None:
        profile = self._profile
        profile.findings[resolved.key] = resolved

        for ref in resolved.affected_refs:
            profile.severity_counts[resolved.severity.value] += 1
            profile.component_tallies.setdefault(ref, SeverityTally()).add(resolved.severity)
            profile.findings_by_ref.setdefault(ref, []).append(resolved)

        for cwe in resolved.finding.cwes:
            profile.cwe_counts[f"CWE-{cwe}"] += 1
        source = resolved.finding.source or {}
        profile.source_counts[source.get("name") or "Unknown"] += 1

    def _count_licenses(self, component: Component, _index: int = 0) -> None:
        profile = self._profile
        ref = component.identity

        if not component.licenses:
            profile.license_distribution[LicenseCategory.UNKNOWN.distribution_key] += 1
            return

        for license_ in component.licenses:
            key = license_.key
            name = license_.display_name
            category = license_category(license_)
            profile.license_counts[name] += 1
            profile.license_distribution[category.distribution_key] += 1

            if not key:
                continue
            summary = profile.license_summaries.setdefault(
                key, LicenseSummary(id=key, name=name, category=category)
            )
            if ref:
                summary.affected_refs[ref] = None
                profile.component_licenses.setdefault(ref, []).append(
                    {"id": key, "name": name, "category": category.value}
                )

    def _finish(self) -> RiskProfile:
        profile = self._profile
        self.logger.info(
            f"Aggregated {len(profile.findings)} unique findings across "
            f"{len(profile.component_tallies)} components"
        )
        self._profile = RiskProfile()
        self._merged = {}
        return profile

    def aggregate(self, findings: list[Finding], components: list[Component]) -> RiskProfile:
        """Aggregate findings and licenses synchronously.

        Args:
            findings: Canonical findings
            components: Deduplicated components

        Returns:
            RiskProfile with global and per-component tallies
        """
        self._profile = RiskProfile()
        self._merged = {}
        for index, finding in enumerate(findings):
            self._group_finding(finding, index)
        for resolved in list(self._merged.values()):
            self._count_finding(resolved)
        for component in components:
            self._count_licenses(component)
        return self._finish()

    async def aggregate_async(
        self,
        findings: list[Finding],
        components: list[Component],
        checkpoint: Checkpoint | None = None,
        chunk_size: int = 250,
    ) -> RiskProfile:
        """Cooperative variant of :meth:`aggregate`."""
        self._profile = RiskProfile()
        self._merged = {}
        await batch_process(findings, self._group_finding, chunk_size, checkpoint)
        merged = list(self._merged.values())
        await batch_process(merged, self._count_finding, chunk_size, checkpoint)
        await batch_process(components, self._count_licenses, chunk_size, checkpoint)
        return self._finish()
