"""
Tests for flattening the dependency tree into display rows.
"""

import pytest

from sbom_analytics.analysis.engine import analyze_sync
from sbom_analytics.visualization.tree_view import flatten_tree

REQUESTS = "pkg:pypi/requests@2.31.0"
URLLIB3 = "pkg:pypi/urllib3@2.0.0"
CERTIFI = "pkg:pypi/certifi@2023.7.22"


@pytest.fixture
def formatted_sample(sample_sbom_data):
    return analyze_sync(sample_sbom_data).formatted


def flatten(formatted, **kwargs):
    return flatten_tree(
        formatted.top_level_refs,
        formatted.component_map,
        formatted.dependency_graph,
        **kwargs,
    )


class TestFlattenTree:
    """Tests for flatten_tree."""

    def test_collapsed_by_default(self, formatted_sample) -> None:
        """Test only the roots are shown when nothing is expanded."""
        rows = flatten(formatted_sample)
        assert [row.ref for row in rows] == [REQUESTS]
        assert rows[0].has_children is True
        assert rows[0].is_expanded is False
        assert rows[0].path == REQUESTS

    def test_expanded_path(self, formatted_sample) -> None:
        """Test expanding a root lists its children one level down."""
        rows = flatten(formatted_sample, expanded_paths={REQUESTS})
        assert len(rows) == 5
        assert [row.level for row in rows] == [0, 1, 1, 1, 1]
        assert rows[1].ref == URLLIB3
        assert rows[1].path == f"{REQUESTS}/{URLLIB3}"
        assert rows[1].has_children is False

    def test_rows_carry_rollups(self, formatted_sample) -> None:
        """Test each row exposes the formatted component."""
        rows = flatten(formatted_sample)
        assert rows[0].node.highest_severity == "Critical"

    def test_search_filter_expands_visible_rows(self, formatted_sample) -> None:
        """Test a visible-ref filter hides other rows and expands the rest."""
        rows = flatten(formatted_sample, visible_refs={REQUESTS, CERTIFI})
        assert [row.ref for row in rows] == [REQUESTS, CERTIFI]
        assert rows[0].is_expanded is True

    def test_cycle_is_not_reexpanded(self, cyclic_sbom_data) -> None:
        """Test a ref already on its own path is listed but not expanded again."""
        formatted = analyze_sync(cyclic_sbom_data).formatted
        expanded = {"a", "a/b", "a/b/c", "a/b/c/b"}
        rows = flatten(formatted, expanded_paths=expanded)
        assert [(row.ref, row.level) for row in rows] == [("a", 0), ("b", 1), ("c", 2), ("b", 3)]

    def test_unknown_roots_are_skipped(self, formatted_sample) -> None:
        """Test refs without a formatted component produce no rows."""
        rows = flatten_tree(
            ["missing", REQUESTS], formatted_sample.component_map, formatted_sample.dependency_graph
        )
        assert [row.ref for row in rows] == [REQUESTS]
