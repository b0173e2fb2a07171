"""
Tests for issue-tracker ticket export.
"""

import csv
import io

import pytest

from sbom_analytics.analysis.engine import analyze_sync
from sbom_analytics.analysis.tickets import (
    ExportPlatform,
    TicketMode,
    component_ticket,
    generate_ticket_csv,
    tickets_from_stats,
    vulnerability_ticket,
)


@pytest.fixture
def sample_stats(sample_sbom_data):
    return analyze_sync(sample_sbom_data).stats


def read_rows(content):
    return list(csv.reader(io.StringIO(content)))


class TestVulnerabilityTickets:
    """Tests for vulnerability-mode rows."""

    def test_rows_follow_statistics_order(self, sample_stats) -> None:
        """Test one row per finding with severity and first score in the title."""
        rows = read_rows(tickets_from_stats(sample_stats))
        assert rows[0] == ["Title", "Description"]
        assert [row[0] for row in rows[1:]] == [
            "Fix CVE-2023-32681 (medium - 6.1)",
            "Fix CVE-2023-43804 (high - N/A)",
            "Fix CVE-2023-45803 (medium - N/A)",
            "Fix GHSA-xqr8-7jwr-rhp7 (critical - 9.8)",
        ]

    def test_description_sections(self, sample_stats) -> None:
        """Test the body lists description and source, skipping empty sections."""
        rows = read_rows(tickets_from_stats(sample_stats))
        assert rows[1][1] == "## Description\nProxy-Authorization header leak\n\n## Source\nNVD"
        assert rows[3][1] == ""
        assert rows[4][1] == "## Source\nNVD"

    def test_remediation_comes_first(self) -> None:
        """Test a recommendation is rendered before the description."""
        title, body = vulnerability_ticket(
            {
                "id": "CVE-1",
                "severity": "high",
                "ratings": [{"score": 7.0}],
                "recommendation": "Upgrade to 2.0",
                "description": "Overflow",
            }
        )
        assert title == "Fix CVE-1 (high - 7)"
        assert body == "## Remediation\nUpgrade to 2.0\n\n## Description\nOverflow"


class TestComponentTickets:
    """Tests for component-mode rows."""

    def test_rows_per_vulnerable_component(self, sample_stats) -> None:
        """Test one row per vulnerable component with its tallies."""
        rows = read_rows(tickets_from_stats(sample_stats, TicketMode.COMPONENTS))
        assert len(rows) == 4
        assert rows[1] == [
            "Fix certifi (1Critical, 0High, 0Medium, 0Low)",
            "Component: certifi\nVersion: 2023.7.22\nTotal Vulnerabilities: 1",
        ]

    def test_missing_fields_default(self) -> None:
        """Test absent counts and version fall back to zero and N/A."""
        title, body = component_ticket({"name": "left-pad"})
        assert title == "Fix left-pad (0Critical, 0High, 0Medium, 0Low)"
        assert body == "Component: left-pad\nVersion: N/A\nTotal Vulnerabilities: 0"


class TestCsvLayout:
    """Tests for headers and quoting."""

    @pytest.mark.parametrize(
        "platform,header",
        [
            (ExportPlatform.JIRA, '"Summary","Description"'),
            (ExportPlatform.GITLAB, '"Title","Description"'),
            (ExportPlatform.GITHUB, '"Title","Body"'),
            ("Generic", '"Title","Description"'),
        ],
    )
    def test_platform_headers(self, platform, header) -> None:
        """Test each tracker gets its own column names."""
        content = generate_ticket_csv([], TicketMode.VULNERABILITIES, platform)
        assert content.splitlines() == [header]

    def test_quotes_are_doubled(self) -> None:
        """Test embedded quotes are escaped and every field is quoted."""
        content = generate_ticket_csv(
            [{"id": 'CVE-"9"', "severity": "low", "description": "a, b"}], "vulnerabilities"
        )
        assert content.splitlines()[1] == '"Fix CVE-""9"" (low - N/A)","## Description'
        assert read_rows(content)[1][1] == "## Description\na, b"

    def test_unknown_platform(self) -> None:
        """Test an unsupported tracker name is rejected."""
        with pytest.raises(ValueError):
            generate_ticket_csv([], "vulnerabilities", "Trello")
