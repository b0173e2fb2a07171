"""
Dependency graph construction from canonical SBOM records.

Edges come from two channels that are merged, never overridden: the
top-level ``dependencies`` list and the legacy per-component
``dependencies`` field.
"""

import logging
from dataclasses import dataclass, field
from functools import cached_property

import networkx as nx

from ..shared.async_utils import Checkpoint, batch_process
from ..shared.models import Component, DependencyRecord, SbomDocument


@dataclass
class DependencyGraph:
    """Forward and reverse adjacency for one SBOM snapshot.

    Both maps may contain cycles and dangling refs (children with no
    component entry); lookups into ``component_map`` are optional.
    """

    components: list[Component] = field(default_factory=list)
    component_map: dict[str, Component] = field(default_factory=dict)
    forward: dict[str, list[str]] = field(default_factory=dict)
    reverse: dict[str, list[str]] = field(default_factory=dict)

    def children(self, ref: str) -> list[str]:
        return self.forward.get(ref, [])

    def parents(self, ref: str) -> list[str]:
        return self.reverse.get(ref, [])

    @property
    def edge_count(self) -> int:
        return sum(len(children) for children in self.forward.values())

    @property
    def nodes(self) -> list[str]:
        """Every ref that appears in the graph, components first."""
        seen = dict.fromkeys(self.component_map)
        for parent, children in self.forward.items():
            seen.setdefault(parent, None)
            for child in children:
                seen.setdefault(child, None)
        return list(seen)

    @cached_property
    def digraph(self) -> nx.DiGraph:
        """The forward graph as a networkx DiGraph."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.nodes)
        for parent, children in self.forward.items():
            graph.add_edges_from((parent, child) for child in children)
        return graph


class GraphBuilder:
    """Builds the component map and dependency graphs for a document."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._reset()

    def _reset(self) -> None:
        self._components: list[Component] = []
        self._component_map: dict[str, Component] = {}
        # dict-as-ordered-set per parent
        self._edges: dict[str, dict[str, None]] = {}
        self._duplicates = 0

    def _add_component(self, component: Component, _index: int = 0) -> None:
        identity = component.identity
        if identity is None:
            self._components.append(component)
            return
        if identity in self._component_map:
            self._duplicates += 1
            return
        self._component_map[identity] = component
        self._components.append(component)
        self._edges.setdefault(identity, {})

    def _add_edges(self, parent: str, children: list[str]) -> None:
        edges = self._edges.setdefault(parent, {})
        for child in children:
            edges.setdefault(child, None)

    def _add_record(self, record: DependencyRecord, _index: int = 0) -> None:
        self._add_edges(record.ref, record.depends_on)

    def _add_legacy_edges(self, component: Component, _index: int = 0) -> None:
        identity = component.identity
        if identity is not None and component.dependencies:
            self._add_edges(identity, component.dependencies)

    def _finish(self) -> DependencyGraph:
        forward = {parent: list(children) for parent, children in self._edges.items()}
        graph = DependencyGraph(
            components=self._components,
            component_map=self._component_map,
            forward=forward,
            reverse=derive_reverse(forward),
        )

        dangling = {
            child
            for children in forward.values()
            for child in children
            if child not in graph.component_map
        }
        if self._duplicates:
            self.logger.debug(f"Dropped {self._duplicates} duplicate components (first seen wins)")
        if dangling:
            self.logger.debug(f"{len(dangling)} dependency refs have no matching component")
        self.logger.info(
            f"Built dependency graph: {len(graph.component_map)} components, "
            f"{graph.edge_count} edges"
        )

        self._reset()
        return graph

    def build(self, document: SbomDocument) -> DependencyGraph:
        """Build the dependency graph synchronously.

        Args:
            document: Canonical SBOM document

        Returns:
            DependencyGraph with consistent forward and reverse maps
        """
        self._reset()
        for component in document.components:
            self._add_component(component)
        for record in document.dependencies:
            self._add_record(record)
        for component in document.components:
            self._add_legacy_edges(component)
        return self._finish()

    async def build_async(
        self,
        document: SbomDocument,
        checkpoint: Checkpoint | None = None,
        chunk_size: int = 250,
    ) -> DependencyGraph:
        """Build the dependency graph, yielding every ``chunk_size`` items."""
        self._reset()
        await batch_process(document.components, self._add_component, chunk_size, checkpoint)
        await batch_process(document.dependencies, self._add_record, chunk_size, checkpoint)
        await batch_process(document.components, self._add_legacy_edges, chunk_size, checkpoint)
        return self._finish()


def derive_reverse(forward: dict[str, list[str]]) -> dict[str, list[str]]:
    """Derive the dependents map from a forward adjacency map."""
    reverse: dict[str, dict[str, None]] = {}
    for parent, children in forward.items():
        for child in children:
            reverse.setdefault(child, {}).setdefault(parent, None)
    return {child: list(parents) for child, parents in reverse.items()}


def build_dependency_graph(document: SbomDocument) -> DependencyGraph:
    """Convenience wrapper around :meth:`GraphBuilder.build`."""
    return GraphBuilder().build(document)
