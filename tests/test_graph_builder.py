"""
Tests for dependency graph construction.
"""

import asyncio

from sbom_analytics.analysis.graph_builder import (
    GraphBuilder,
    build_dependency_graph,
    derive_reverse,
)
from sbom_analytics.shared.async_utils import Checkpoint
from sbom_analytics.shared.collections import canonicalize_document

REQUESTS = "pkg:pypi/requests@2.31.0"
URLLIB3 = "pkg:pypi/urllib3@2.0.0"


class TestGraphBuilder:
    """Tests for GraphBuilder."""

    def test_sample_graph(self, sample_graph) -> None:
        """Test edges and components of the sample SBOM."""
        assert len(sample_graph.component_map) == 5
        assert sample_graph.children("app") == [REQUESTS]
        assert len(sample_graph.children(REQUESTS)) == 4
        assert sample_graph.parents(URLLIB3) == [REQUESTS]
        assert sample_graph.parents(REQUESTS) == ["app"]

    def test_reverse_is_consistent(self, sample_graph) -> None:
        """Test every forward edge appears in the reverse map and vice versa."""
        forward_edges = {
            (parent, child)
            for parent, children in sample_graph.forward.items()
            for child in children
        }
        reverse_edges = {
            (parent, child)
            for child, parents in sample_graph.reverse.items()
            for parent in parents
        }
        assert forward_edges == reverse_edges

    def test_first_component_wins(self) -> None:
        """Test duplicate refs keep the first component."""
        document = canonicalize_document(
            {
                "components": [
                    {"bom-ref": "a", "name": "first"},
                    {"bom-ref": "a", "name": "second"},
                ]
            }
        )
        graph = build_dependency_graph(document)
        assert graph.component_map["a"].name == "first"
        assert len(graph.components) == 1

    def test_name_is_identity_without_ref(self) -> None:
        """Test that components without a ref are keyed by name."""
        document = canonicalize_document({"components": [{"name": "lib", "version": "1"}]})
        graph = build_dependency_graph(document)
        assert list(graph.component_map) == ["lib"]

    def test_edge_channels_are_merged(self, make_sbom) -> None:
        """Test top-level and legacy per-component edges union."""
        raw = make_sbom({"a": ["b"]})
        raw["components"][0]["dependencies"] = ["c", "b"]
        raw["components"].append({"bom-ref": "c", "name": "c"})
        graph = build_dependency_graph(canonicalize_document(raw))
        assert graph.children("a") == ["b", "c"]
        assert graph.parents("c") == ["a"]

    def test_duplicate_edges_collapse(self, make_sbom) -> None:
        """Test repeated dependency records do not duplicate edges."""
        raw = make_sbom({"a": ["b"]})
        raw["dependencies"].append({"ref": "a", "dependsOn": ["b"]})
        graph = build_dependency_graph(canonicalize_document(raw))
        assert graph.children("a") == ["b"]
        assert graph.edge_count == 1

    def test_dangling_refs_are_kept(self) -> None:
        """Test edges to refs without a component stay in the graph."""
        raw = {
            "components": [{"bom-ref": "a", "name": "a"}],
            "dependencies": [{"ref": "a", "dependsOn": ["ghost"]}],
        }
        graph = build_dependency_graph(canonicalize_document(raw))
        assert graph.children("a") == ["ghost"]
        assert "ghost" not in graph.component_map
        assert "ghost" in graph.nodes
        assert graph.digraph.has_edge("a", "ghost")

    def test_unknown_ref_lookups(self, sample_graph) -> None:
        """Test lookups of unknown refs return empty lists."""
        assert sample_graph.children("nope") == []
        assert sample_graph.parents("nope") == []

    def test_cycles_are_represented(self, cyclic_sbom_data) -> None:
        """Test legacy edges forming a cycle."""
        graph = build_dependency_graph(canonicalize_document(cyclic_sbom_data))
        assert graph.children("b") == ["c"]
        assert graph.children("c") == ["b"]
        assert sorted(graph.parents("b")) == ["a", "c"]

    def test_async_build_matches_sync(self, sample_document) -> None:
        """Test the cooperative build yields the same graph."""
        checkpoint = Checkpoint()
        graph = asyncio.run(GraphBuilder().build_async(sample_document, checkpoint, chunk_size=2))
        expected = GraphBuilder().build(sample_document)
        assert graph.forward == expected.forward
        assert graph.reverse == expected.reverse
        assert checkpoint.yields > 0

    def test_builder_is_reusable(self, sample_document) -> None:
        """Test a builder produces independent graphs across runs."""
        builder = GraphBuilder()
        first = builder.build(sample_document)
        second = builder.build(sample_document)
        assert first.forward == second.forward
        assert first.component_map is not second.component_map


def test_derive_reverse() -> None:
    """Test the dependents map of a diamond."""
    reverse = derive_reverse({"a": ["b", "c"], "b": ["d"], "c": ["d"]})
    assert reverse == {"b": ["a"], "c": ["a"], "d": ["b", "c"]}
