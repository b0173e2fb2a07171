"""
Flattening the dependency tree into rows for a virtualized tree view.
"""

from dataclasses import dataclass

from ..analysis.tree_formatter import EnhancedComponent


@dataclass
class FlatNode:
    """One visible row of the dependency tree."""

    node: EnhancedComponent
    ref: str
    level: int
    path: str  # Slash-joined refs from the root row down to this row
    has_children: bool
    is_expanded: bool


def flatten_tree(
    component_refs: list[str],
    component_map: dict[str, EnhancedComponent],
    dependency_graph: dict[str, list[str]],
    expanded_paths: set[str] | None = None,
    visible_refs: set[str] | None = None,
) -> list[FlatNode]:
    """Flatten the tree under ``component_refs`` in display order.

    Rows are expanded when their path is in ``expanded_paths``. When
    ``visible_refs`` is given (a search filter), only those refs are shown
    and every visible row with children is expanded. A ref that already
    appears on its own path is listed but never expanded again.

    Args:
        component_refs: Root refs, in display order
        component_map: Formatted components by ref
        dependency_graph: Forward adjacency
        expanded_paths: Paths the user has expanded
        visible_refs: Optional filter of refs to show

    Returns:
        Rows in depth-first display order
    """
    expanded_paths = expanded_paths or set()
    result: list[FlatNode] = []
    # Frames: (refs, next index, level, parent path, refs on the path)
    stack: list[tuple[list[str], int, int, str, frozenset[str]]] = [
        (list(component_refs), 0, 0, "", frozenset())
    ]

    while stack:
        refs, index, level, path, ancestors = stack.pop()
        if index >= len(refs):
            continue
        stack.append((refs, index + 1, level, path, ancestors))

        ref = refs[index]
        node = component_map.get(ref)
        if node is None:
            continue
        if visible_refs is not None and ref not in visible_refs:
            continue

        node_path = f"{path}/{ref}" if path else ref
        children = dependency_graph.get(ref, [])
        has_children = bool(children)
        if visible_refs is not None:
            is_expanded = has_children
        else:
            is_expanded = node_path in expanded_paths

        result.append(
            FlatNode(
                node=node,
                ref=ref,
                level=level,
                path=node_path,
                has_children=has_children,
                is_expanded=is_expanded,
            )
        )

        if is_expanded and has_children and ref not in ancestors:
            stack.append((children, 0, level + 1, node_path, ancestors | {ref}))

    return result
