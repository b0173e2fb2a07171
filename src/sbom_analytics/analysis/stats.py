"""
Aggregate statistics assembled from the graph, risk profile and insights.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

from ..shared.models import SEVERITY_ORDER, AnalysisConfig, ResolvedFinding
from .graph_builder import DependencyGraph
from .insights import DeveloperStats
from .risk import RiskProfile


@dataclass
class SbomSizeProfile:
    component_count: int = 0
    is_large: bool = False


@dataclass
class SbomStats:
    """Dashboard-level statistics for one SBOM snapshot."""

    total_components: int = 0
    vulnerability_counts: dict[str, int] = field(
        default_factory=lambda: {level.value: 0 for level in SEVERITY_ORDER}
    )
    license_counts: dict[str, int] = field(default_factory=dict)
    top_licenses: list[dict[str, Any]] = field(default_factory=list)
    license_distribution: dict[str, int] = field(default_factory=dict)
    vulnerable_components: list[dict[str, Any]] = field(default_factory=list)
    all_vulnerable_components: list[dict[str, Any]] = field(default_factory=list)
    total_vulnerabilities: int = 0
    all_vulnerabilities: list[dict[str, Any]] = field(default_factory=list)
    all_licenses: list[dict[str, Any]] = field(default_factory=list)
    all_license_components: list[dict[str, Any]] = field(default_factory=list)
    unique_vulnerability_count: int = 0
    avg_vulnerabilities_per_component: float = 0.0
    dependency_stats: dict[str, int] = field(
        default_factory=lambda: {"direct": 0, "transitive": 0}
    )
    dependents_distribution: dict[int, int] = field(default_factory=dict)
    vulnerability_impact_distribution: dict[int, int] = field(default_factory=dict)
    cwe_counts: dict[str, int] = field(default_factory=dict)
    source_counts: dict[str, int] = field(default_factory=dict)
    developer_stats: DeveloperStats = field(default_factory=DeveloperStats)
    size_profile: SbomSizeProfile = field(default_factory=SbomSizeProfile)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["developer_stats"] = self.developer_stats.to_dict()
        return data


def size_profile(component_count: int, threshold: int = 15000) -> SbomSizeProfile:
    return SbomSizeProfile(component_count=component_count, is_large=component_count >= threshold)


def _finding_summary(resolved: ResolvedFinding) -> dict[str, Any]:
    finding = resolved.finding
    return {
        "id": resolved.id,
        "severity": resolved.severity.value,
        "affected_count": len(resolved.affected_refs),
        "affected_component_refs": list(resolved.affected_refs),
        "title": finding.description or finding.detail,
        "description": finding.description,
        "detail": finding.detail,
        "recommendation": finding.recommendation,
        "advisories": finding.advisories,
        "cwes": finding.cwes,
        "source": finding.source,
        "references": finding.references,
        "ratings": [asdict(rating) for rating in finding.ratings],
        "analysis": finding.analysis,
        "created": finding.created,
        "published": finding.published,
        "updated": finding.updated,
        "rejected": finding.rejected,
        "proof_of_concept": finding.proof_of_concept,
    }


def build_stats(
    graph: DependencyGraph,
    profile: RiskProfile,
    depths: dict[str, int],
    developer_stats: DeveloperStats,
    config: AnalysisConfig | None = None,
) -> SbomStats:
    """Assemble :class:`SbomStats` from the derived structures.

    Args:
        graph: Dependency graph of the snapshot
        profile: Aggregated findings and licenses
        depths: Breadth-first depths from the document root
        developer_stats: Version conflicts and metadata quality
        config: Analysis configuration (``top_n``, size threshold)

    Returns:
        Populated SbomStats
    """
    config = config or AnalysisConfig()
    components = graph.components
    total_components = len(components)

    def describe(ref: str) -> tuple[str, str]:
        component = graph.component_map.get(ref)
        if component is None:
            return "Unknown", ""
        return component.name or "Unknown", component.version or ""

    all_vulnerable = []
    for ref, tally in profile.component_tallies.items():
        name, version = describe(ref)
        all_vulnerable.append({"name": name, "version": version, "ref": ref, **tally.to_dict()})
    all_vulnerable.sort(key=lambda item: (-item["critical"], -item["high"], -item["total"]))

    all_licenses = [
        {
            "id": summary.id,
            "name": summary.name,
            "category": summary.category.value,
            "affected_count": summary.affected_count,
        }
        for summary in profile.license_summaries.values()
    ]
    all_licenses.sort(key=lambda item: -item["affected_count"])

    all_license_components = []
    for ref, licenses in profile.component_licenses.items():
        name, version = describe(ref)
        all_license_components.append(
            {"name": name, "version": version, "ref": ref, "licenses": licenses}
        )

    all_vulnerabilities = [_finding_summary(resolved) for resolved in profile.findings.values()]
    all_vulnerabilities.sort(key=lambda item: (-item["affected_count"], item["id"]))

    total_vulnerabilities = profile.total_occurrences
    average = round(total_vulnerabilities / total_components, 2) if total_components else 0.0

    direct = sum(1 for depth in depths.values() if depth == 1)

    dependents_distribution: dict[int, int] = {}
    impact_distribution: dict[int, int] = {}
    for component in components:
        ref = component.identity
        if not ref:
            continue
        in_degree = len(graph.parents(ref))
        dependents_distribution[in_degree] = dependents_distribution.get(in_degree, 0) + 1
        tally = profile.component_tallies.get(ref)
        if tally is not None:
            impact_distribution[in_degree] = impact_distribution.get(in_degree, 0) + tally.total
    if not dependents_distribution:
        dependents_distribution = {0: total_components}
        impact_distribution = {0: total_vulnerabilities}

    return SbomStats(
        total_components=total_components,
        vulnerability_counts=dict(profile.severity_counts),
        license_counts=dict(profile.license_counts),
        top_licenses=profile.top_licenses(config.top_n),
        license_distribution=dict(profile.license_distribution),
        vulnerable_components=all_vulnerable[: config.top_n],
        all_vulnerable_components=all_vulnerable,
        total_vulnerabilities=total_vulnerabilities,
        all_vulnerabilities=all_vulnerabilities,
        all_licenses=all_licenses,
        all_license_components=all_license_components,
        unique_vulnerability_count=len(profile.findings),
        avg_vulnerabilities_per_component=average,
        dependency_stats={"direct": direct, "transitive": max(0, total_components - direct)},
        dependents_distribution=dependents_distribution,
        vulnerability_impact_distribution=impact_distribution,
        cwe_counts=dict(profile.cwe_counts),
        source_counts=dict(profile.source_counts),
        developer_stats=developer_stats,
        size_profile=size_profile(total_components, config.large_sbom_threshold),
    )
