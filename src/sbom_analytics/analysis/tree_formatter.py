"""
Inherent vs. transitive rollups for every component.

Inherent facts are attached to a component directly; transitive facts are the
union of the inherent facts of everything reachable from it through forward
edges, excluding the component itself.
"""

import logging
from dataclasses import dataclass, field

import networkx as nx

from ..shared.async_utils import Checkpoint, tick
from ..shared.models import (
    SEVERITY_BUCKETS,
    Component,
    License,
    LicenseCategory,
    ResolvedFinding,
    empty_license_distribution,
    empty_severity_buckets,
)
from .graph_builder import DependencyGraph
from .licenses import license_category
from .risk import RiskProfile

SeverityBuckets = dict[str, list[ResolvedFinding]]


@dataclass
class EnhancedComponent:
    """A component with its inherent and transitive rollups."""

    component: Component
    inherent: SeverityBuckets = field(default_factory=empty_severity_buckets)
    transitive: SeverityBuckets = field(default_factory=empty_severity_buckets)
    license_distribution: dict[str, int] = field(default_factory=empty_license_distribution)
    transitive_license_distribution: dict[str, int] = field(
        default_factory=empty_license_distribution
    )
    # Finding id -> ref of the dependency that introduced it
    transitive_sources: dict[str, str] = field(default_factory=dict)

    @property
    def ref(self) -> str | None:
        return self.component.identity

    @property
    def inherent_count(self) -> int:
        return sum(len(findings) for findings in self.inherent.values())

    @property
    def transitive_count(self) -> int:
        return sum(len(findings) for findings in self.transitive.values())

    @property
    def highest_severity(self) -> str | None:
        """Most severe bucket that is non-empty in either split."""
        for bucket in SEVERITY_BUCKETS:
            if self.inherent[bucket] or self.transitive[bucket]:
                return bucket
        return None


@dataclass
class FormattedStatistics:
    unique_licenses: list[License] = field(default_factory=list)
    unique_vulnerabilities: SeverityBuckets = field(default_factory=empty_severity_buckets)


@dataclass
class FormattedSbom:
    """The per-component view consumed by tree, graph and diagram renderers."""

    component_map: dict[str, EnhancedComponent] = field(default_factory=dict)
    dependency_graph: dict[str, list[str]] = field(default_factory=dict)
    dependents_graph: dict[str, list[str]] = field(default_factory=dict)
    blast_radius: dict[str, int] = field(default_factory=dict)
    top_level_refs: list[str] = field(default_factory=list)
    statistics: FormattedStatistics = field(default_factory=FormattedStatistics)


@dataclass
class _Facts:
    """Transitive facts of one node set: findings, license keys and unlicensed refs.

    ``unlicensed`` is a bitmask over node positions in the graph.
    """

    findings: dict[str, tuple[ResolvedFinding, str]] = field(default_factory=dict)
    licenses: dict[str, LicenseCategory] = field(default_factory=dict)
    unlicensed: int = 0

    def absorb(self, other: "_Facts") -> None:
        for key, entry in other.findings.items():
            self.findings.setdefault(key, entry)
        for key, category in other.licenses.items():
            self.licenses.setdefault(key, category)
        self.unlicensed |= other.unlicensed


def unique_licenses(components: list[Component]) -> list[License]:
    """Distinct licenses across components, keyed by id, then name, then expression."""
    seen: dict[str, License] = {}
    for component in components:
        for license_ in component.licenses:
            key = license_.key
            if key and key not in seen:
                seen[key] = license_
    return list(seen.values())


def unique_vulnerabilities(profile: RiskProfile) -> SeverityBuckets:
    """Distinct findings bucketed by resolved severity; unrated findings are left out."""
    buckets = empty_severity_buckets()
    for resolved in profile.findings.values():
        if resolved.bucket is not None:
            buckets[resolved.bucket].append(resolved)
    return buckets


def find_top_level_refs(graph: DependencyGraph, root_ref: str | None = None) -> list[str]:
    """Components that no other component depends on.

    Only edges whose parent is itself a component count, so the direct
    dependencies of a document root outside the component list are top-level.

    Falls back to the document root, then to the first component, when every
    component is somebody's dependency.
    """
    child_refs = {
        child
        for parent, children in graph.forward.items()
        if parent in graph.component_map
        for child in children
    }
    top_level = [ref for ref in graph.component_map if ref not in child_refs]
    if top_level:
        return top_level
    if root_ref:
        return [root_ref]
    first = next(iter(graph.component_map), None)
    return [first] if first else []


class TreeFormatter:
    """Builds the formatted per-component view for one snapshot."""

    def __init__(self, graph: DependencyGraph, profile: RiskProfile):
        self.graph = graph
        self.profile = profile
        self.logger = logging.getLogger(__name__)

    def _inherent(self, ref: str, component: Component) -> EnhancedComponent:
        enhanced = EnhancedComponent(component=component)
        for resolved in self.profile.findings_by_ref.get(ref, []):
            if resolved.bucket is not None:
                enhanced.inherent[resolved.bucket].append(resolved)

        if not component.licenses:
            enhanced.license_distribution[LicenseCategory.UNKNOWN.distribution_key] += 1
        for license_ in component.licenses:
            enhanced.license_distribution[license_category(license_).distribution_key] += 1
        return enhanced

    def _own_facts(self, ref: str, position: int) -> _Facts:
        facts = _Facts()
        component = self.graph.component_map.get(ref)
        if component is None:
            return facts
        for resolved in self.profile.findings_by_ref.get(ref, []):
            if resolved.bucket is not None:
                facts.findings.setdefault(resolved.key, (resolved, ref))
        keyed = [license_ for license_ in component.licenses if license_.key]
        if not keyed:
            facts.unlicensed = 1 << position
        for license_ in keyed:
            facts.licenses.setdefault(license_.key, license_category(license_))
        return facts

    @staticmethod
    def _apply(enhanced: EnhancedComponent, facts: _Facts) -> None:
        for resolved, source_ref in facts.findings.values():
            enhanced.transitive[resolved.bucket].append(resolved)
            enhanced.transitive_sources.setdefault(resolved.id, source_ref)
        distribution = enhanced.transitive_license_distribution
        for category in facts.licenses.values():
            distribution[category.distribution_key] += 1
        distribution[LicenseCategory.UNKNOWN.distribution_key] += facts.unlicensed.bit_count()

    async def format(
        self,
        blast_radius: dict[str, int],
        root_ref: str | None = None,
        checkpoint: Checkpoint | None = None,
        chunk_size: int = 50,
        progress_range: tuple[float, float] = (50.0, 99.0),
    ) -> FormattedSbom:
        """Compute inherent and transitive rollups for every component.

        Strongly connected components are processed leaves first, so each
        node's downstream facts are computed once and reused by every
        dependent. Members of one cycle share the downstream set and add
        each other's inherent facts, never their own.

        Args:
            blast_radius: Precomputed blast radius map
            root_ref: Document root used for the top-level fallback
            checkpoint: Optional yield point
            chunk_size: Strongly connected components between yields
            progress_range: Percent span reported while traversing

        Returns:
            FormattedSbom for the snapshot
        """
        component_map = {
            ref: self._inherent(ref, component)
            for ref, component in self.graph.component_map.items()
        }

        condensed = nx.condensation(self.graph.digraph)
        order = list(reversed(list(nx.topological_sort(condensed))))
        position = {ref: index for index, ref in enumerate(self.graph.digraph.nodes)}
        # Facts of an SCC are kept until every dependent SCC has absorbed them
        downstream: dict[int, _Facts] = {}
        own: dict[int, dict[str, _Facts]] = {}
        pending = {scc_id: condensed.in_degree(scc_id) for scc_id in condensed.nodes}
        total = len(order)
        start, end = progress_range
        step = max(1, chunk_size)

        for index, scc_id in enumerate(order):
            members = condensed.nodes[scc_id]["members"]
            own[scc_id] = {member: self._own_facts(member, position[member]) for member in members}

            below = _Facts()
            for child in condensed.successors(scc_id):
                for member_facts in own[child].values():
                    below.absorb(member_facts)
                below.absorb(downstream[child])
                pending[child] -= 1
                if not pending[child]:
                    del own[child], downstream[child]
            downstream[scc_id] = below

            for member in members:
                enhanced = component_map.get(member)
                if enhanced is None:
                    continue
                facts = below
                if len(members) > 1:
                    facts = _Facts()
                    for other, other_facts in own[scc_id].items():
                        if other != member:
                            facts.absorb(other_facts)
                    facts.absorb(below)
                self._apply(enhanced, facts)

            if not pending[scc_id]:
                del own[scc_id], downstream[scc_id]

            if (index + 1) % step == 0:
                if checkpoint is not None:
                    checkpoint.report(
                        start + (end - start) * (index + 1) / total,
                        f"Transitive analysis ({index + 1}/{total})...",
                    )
                    await checkpoint()
                else:
                    await tick()

        components = self.graph.components
        formatted = FormattedSbom(
            component_map=component_map,
            dependency_graph=self.graph.forward,
            dependents_graph=self.graph.reverse,
            blast_radius=blast_radius,
            top_level_refs=find_top_level_refs(self.graph, root_ref),
            statistics=FormattedStatistics(
                unique_licenses=unique_licenses(components),
                unique_vulnerabilities=unique_vulnerabilities(self.profile),
            ),
        )
        self.logger.debug(
            f"Formatted {len(component_map)} components, "
            f"{len(formatted.top_level_refs)} top-level refs"
        )
        return formatted
