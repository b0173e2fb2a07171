"""
Mermaid flowchart export of the dependency tree.

Output size is bounded by ``max_nodes`` and ``max_edges``; once either
budget is spent the walk stops and the result is flagged as truncated.
"""

import logging
from collections import deque
from dataclasses import dataclass

from ..analysis.tree_formatter import EnhancedComponent, FormattedSbom
from ..shared.exceptions import DiagramError, create_error_context
from ..shared.models import DiagramOptions

logger = logging.getLogger(__name__)

CLASS_DEFINITIONS: tuple[str, ...] = (
    "classDef critical fill:#7f1d1d,stroke:#fecaca,color:#fff;",
    "classDef high fill:#b45309,stroke:#fed7aa,color:#111;",
    "classDef medium fill:#a16207,stroke:#fde68a,color:#111;",
    "classDef low fill:#0f766e,stroke:#99f6e4,color:#fff;",
    "classDef clean fill:#1e3a8a,stroke:#bfdbfe,color:#fff;",
)

EMPTY_DIAGRAM = 'flowchart LR\nempty["No components matched the current filters"]'

_LABEL_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("\n", "<br/>"),
)


@dataclass
class DiagramResult:
    diagram: str
    node_count: int
    edge_count: int
    truncated: bool
    max_nodes: int
    max_edges: int


def sanitize_label_text(value: str) -> str:
    """Escape text so it cannot break a quoted Mermaid label."""
    for old, new in _LABEL_REPLACEMENTS:
        value = value.replace(old, new)
    return value


def matches_query(enhanced: EnhancedComponent, query: str) -> bool:
    """Case-insensitive substring match over name, group, ref and purl."""
    if not query.strip():
        return True
    component = enhanced.component
    haystack = " ".join(
        part for part in (component.name, component.group, enhanced.ref, component.purl) if part
    )
    return query.lower() in haystack.lower()


def build_label(enhanced: EnhancedComponent, max_label_length: int) -> str:
    """Name, version and vulnerability summary, truncated to the label budget."""
    component = enhanced.component
    inherent_total = enhanced.inherent_count
    transitive_total = enhanced.transitive_count
    total = inherent_total + transitive_total

    summary = ""
    if total:
        summary = f"{total} vulns ({inherent_total}nd, {transitive_total}tr)"
        if len(summary) > max_label_length:
            summary = f"{total} vulns"

    parts = [sanitize_label_text(component.name or "Unnamed Component")]
    if component.version:
        parts.append(f"v{sanitize_label_text(component.version)}")
    if summary:
        parts.append(summary)

    label = "<br/>".join(parts)
    if len(label) <= max_label_length:
        return label
    return f"{label[: max_label_length - 3]}..."


def severity_class(enhanced: EnhancedComponent) -> str:
    highest = enhanced.highest_severity
    return highest.lower() if highest else "clean"


def has_any_vulnerability(enhanced: EnhancedComponent) -> bool:
    return enhanced.inherent_count + enhanced.transitive_count > 0


def validate_options(options: DiagramOptions) -> None:
    """Reject option values that cannot produce a diagram.

    Raises:
        DiagramError: If a limit is negative or labels cannot hold an ellipsis
    """
    for name in ("max_depth", "max_nodes", "max_edges"):
        value = getattr(options, name)
        if value < 0:
            raise DiagramError(
                f"{name} must not be negative", create_error_context(option=name, value=value)
            )
    if options.max_label_length < 4:
        raise DiagramError(
            "max_label_length must be at least 4",
            create_error_context(value=options.max_label_length),
        )


class DiagramBuilder:
    """Walks the formatted SBOM and emits a bounded Mermaid flowchart."""

    def __init__(self, formatted: FormattedSbom, options: DiagramOptions | None = None):
        self.formatted = formatted
        self.options = options or DiagramOptions()
        validate_options(self.options)
        self.logger = logging.getLogger(__name__)

    def _matching_refs(self) -> set[str]:
        """Refs whose subtree contains a query match: the matches and their ancestors."""
        component_map = self.formatted.component_map
        matches = [
            ref for ref, enhanced in component_map.items()
            if matches_query(enhanced, self.options.query)
        ]
        included = set(matches)
        queue = deque(matches)
        while queue:
            ref = queue.popleft()
            for parent in self.formatted.dependents_graph.get(ref, []):
                if parent not in included and parent in component_map:
                    included.add(parent)
                    queue.append(parent)
        return included

    def _roots(self) -> list[str]:
        roots = self.options.root_refs or self.formatted.top_level_refs
        if not self.options.show_vulnerable_only:
            return list(roots)
        component_map = self.formatted.component_map
        return [
            ref
            for ref in roots
            if ref in component_map and has_any_vulnerability(component_map[ref])
        ]

    def build(self) -> DiagramResult:
        """Build the diagram.

        Returns:
            DiagramResult with the Mermaid text and size counters
        """
        options = self.options
        component_map = self.formatted.component_map
        dependency_graph = self.formatted.dependency_graph

        included: set[str] | None = None
        if options.prune_non_matches and options.query.strip():
            included = self._matching_refs()

        node_ids: dict[str, str] = {}
        nodes: list[str] = []
        edges: list[str] = []
        seen_edges: set[tuple[str, str]] = set()
        # Shallowest depth at which each ref's children were pushed
        expanded_at: dict[str, int] = {}
        truncated = False

        def node_id(ref: str) -> str:
            if ref not in node_ids:
                node_ids[ref] = f"node_{len(node_ids)}"
            return node_ids[ref]

        # Frames are (ref, depth, parent ref); children pushed in reverse keep source order
        stack: list[tuple[str, int, str | None]] = [
            (ref, 0, None) for ref in reversed(self._roots())
        ]
        while stack:
            ref, depth, parent = stack.pop()
            if included is not None and ref not in included:
                continue
            if len(nodes) >= options.max_nodes or len(edges) >= options.max_edges:
                truncated = True
                break
            enhanced = component_map.get(ref)
            if enhanced is None:
                continue

            is_new = ref not in node_ids
            current = node_id(ref)
            if is_new:
                label = build_label(enhanced, options.max_label_length)
                nodes.append(f'{current}["{label}"]:::{severity_class(enhanced)}')

            if parent is not None:
                edge = (node_id(parent), current)
                if edge not in seen_edges:
                    seen_edges.add(edge)
                    edges.append(f"{edge[0]} --> {edge[1]}")

            if depth >= options.max_depth:
                continue
            if expanded_at.get(ref, depth + 1) <= depth:
                continue
            expanded_at[ref] = depth
            for child in reversed(dependency_graph.get(ref, [])):
                stack.append((child, depth + 1, ref))

        if not nodes:
            return DiagramResult(
                diagram=EMPTY_DIAGRAM,
                node_count=0,
                edge_count=0,
                truncated=truncated,
                max_nodes=options.max_nodes,
                max_edges=options.max_edges,
            )

        if truncated:
            self.logger.warning(
                f"Diagram truncated at {len(nodes)} nodes and {len(edges)} edges "
                f"(limits {options.max_nodes}/{options.max_edges})"
            )
        diagram = "\n".join(["flowchart LR", *CLASS_DEFINITIONS, *nodes, *edges])
        return DiagramResult(
            diagram=diagram,
            node_count=len(nodes),
            edge_count=len(edges),
            truncated=truncated,
            max_nodes=options.max_nodes,
            max_edges=options.max_edges,
        )


def build_mermaid_diagram(
    formatted: FormattedSbom, options: DiagramOptions | None = None
) -> DiagramResult:
    """Build a Mermaid flowchart for a formatted SBOM; see :class:`DiagramBuilder`."""
    return DiagramBuilder(formatted, options).build()
