"""
Diagram export and tree flattening for the formatted SBOM view.
"""

from .diagram import DiagramBuilder, DiagramResult, build_mermaid_diagram
from .tree_view import FlatNode, flatten_tree

__all__ = ["DiagramBuilder", "DiagramResult", "build_mermaid_diagram", "FlatNode", "flatten_tree"]
