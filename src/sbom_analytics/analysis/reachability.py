"""
Reachability over the dependency graph: ancestors, blast radius and depth.

Every traversal carries its own visited set, so cycles and dangling refs
terminate without special casing by the caller.
"""

import logging
from collections import deque

import networkx as nx

from ..shared.async_utils import Checkpoint, tick
from .graph_builder import DependencyGraph

logger = logging.getLogger(__name__)


def ancestors(graph: DependencyGraph, ref: str) -> set[str]:
    """Return every component that transitively depends on ``ref``.

    A node that reaches itself through a cycle is its own ancestor and is
    included in the result.

    Args:
        graph: Dependency graph
        ref: Component reference

    Returns:
        Set of dependent refs
    """
    found: set[str] = set()
    stack = list(graph.parents(ref))
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(parent for parent in graph.parents(current) if parent not in found)
    return found


def descendants(graph: DependencyGraph, ref: str) -> set[str]:
    """Return every ref reachable through forward edges from ``ref``."""
    found: set[str] = set()
    stack = list(graph.children(ref))
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(child for child in graph.children(current) if child not in found)
    return found


class ReachabilityAnalyzer:
    """Computes the blast radius of every node in one pass.

    Works on the condensation of the graph into strongly connected
    components, so nodes of the same cycle share a single ancestor set and
    diamond-shaped graphs are not re-walked.
    """

    def __init__(self, graph: DependencyGraph):
        self.graph = graph
        self.logger = logging.getLogger(__name__)

    def _condense(self) -> tuple[nx.DiGraph, dict[int, bool]]:
        digraph = self.graph.digraph
        condensed = nx.condensation(digraph)
        cyclic = {}
        for scc_id, data in condensed.nodes(data=True):
            members = data["members"]
            if len(members) > 1:
                cyclic[scc_id] = True
            else:
                (member,) = members
                cyclic[scc_id] = digraph.has_edge(member, member)
        return condensed, cyclic

    def _walk(self, blast_radius: dict[str, int]):
        """Fill ``blast_radius`` one strongly connected component at a time.

        Ancestor sets are int bitmasks over node indices. A component's mask
        is released once every component depending on it has been visited,
        so only the frontier of the topological walk is held in memory.

        Yields after each component so callers can interleave yield points.
        """
        condensed, cyclic = self._condense()
        position = {ref: index for index, ref in enumerate(self.graph.digraph.nodes)}
        # Ancestors of an SCC plus its own members, pending for unvisited successors
        closed: dict[int, int] = {}
        pending = {scc_id: condensed.out_degree(scc_id) for scc_id in condensed.nodes}

        for index, scc_id in enumerate(nx.topological_sort(condensed)):
            mask = 0
            for parent in condensed.predecessors(scc_id):
                mask |= closed[parent]
                pending[parent] -= 1
                if not pending[parent]:
                    del closed[parent]

            members = condensed.nodes[scc_id]["members"]
            count = mask.bit_count()
            if cyclic[scc_id]:
                count += len(members)
            for member in members:
                blast_radius[member] = count
                mask |= 1 << position[member]
            if pending[scc_id]:
                closed[scc_id] = mask
            yield index

    def blast_radius_map(self) -> dict[str, int]:
        """Count the transitive dependents of every node.

        Returns:
            Mapping of ref to ``len(ancestors(ref))``
        """
        blast_radius: dict[str, int] = {}
        for _ in self._walk(blast_radius):
            pass
        return blast_radius

    async def compute_blast_radius(
        self, checkpoint: Checkpoint | None = None, chunk_size: int = 50
    ) -> dict[str, int]:
        """Cooperative variant of :meth:`blast_radius_map`.

        Args:
            checkpoint: Optional yield point for cooperative scheduling
            chunk_size: Number of strongly connected components between yields

        Returns:
            Mapping of ref to ``len(ancestors(ref))``
        """
        blast_radius: dict[str, int] = {}
        step = max(1, chunk_size)
        for index in self._walk(blast_radius):
            if (index + 1) % step == 0:
                if checkpoint is not None:
                    await checkpoint()
                else:
                    await tick()

        self.logger.debug(f"Computed blast radius for {len(blast_radius)} nodes")
        return blast_radius


def depth_from_root(graph: DependencyGraph, root_ref: str | None) -> dict[str, int]:
    """Breadth-first depth of every node reachable from the root.

    The root itself has depth 0 and its direct dependencies depth 1. Nodes
    unreachable from the root are absent.
    """
    if not root_ref:
        return {}
    depths = {root_ref: 0}
    queue = deque([root_ref])
    while queue:
        current = queue.popleft()
        for child in graph.children(current):
            if child not in depths:
                depths[child] = depths[current] + 1
                queue.append(child)
    return depths


def path_to_root(graph: DependencyGraph, target_ref: str) -> list[str] | None:
    """Shortest chain of refs from a top-level component down to ``target_ref``.

    Args:
        graph: Dependency graph
        target_ref: Component to locate

    Returns:
        Refs ordered root first, or ``None`` if the ref is unknown or every
        dependent chain ends in a cycle
    """
    if not target_ref or target_ref not in graph.component_map:
        return None

    queue = deque([(target_ref, [target_ref])])
    visited = {target_ref}
    while queue:
        ref, path = queue.popleft()
        parents = graph.parents(ref)
        if not parents:
            return list(reversed(path))
        for parent in parents:
            if parent not in visited:
                visited.add(parent)
                queue.append((parent, [*path, parent]))
    return None
