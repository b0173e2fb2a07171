"""
Issue-tracker ticket export: one CSV row per vulnerability or per vulnerable component.

Rows are built from the summaries in :class:`SbomStats`, so the export reflects
the same resolved severities and tallies as the dashboard statistics.
"""

import csv
import io
import logging
from enum import Enum
from typing import Any

from .stats import SbomStats

logger = logging.getLogger(__name__)


class ExportPlatform(str, Enum):
    """Issue trackers with a known CSV import layout."""

    JIRA = "Jira"
    GITLAB = "GitLab"
    GITHUB = "GitHub"
    GENERIC = "Generic"


class TicketMode(str, Enum):
    VULNERABILITIES = "vulnerabilities"
    COMPONENTS = "components"


# (title column, description column) per platform
PLATFORM_HEADERS: dict[ExportPlatform, tuple[str, str]] = {
    ExportPlatform.JIRA: ("Summary", "Description"),
    ExportPlatform.GITLAB: ("Title", "Description"),
    ExportPlatform.GITHUB: ("Title", "Body"),
    ExportPlatform.GENERIC: ("Title", "Description"),
}


def _first_score(item: dict[str, Any]) -> str:
    ratings = item.get("ratings") or []
    score = ratings[0].get("score") if ratings else None
    return f"{score:g}" if score else "N/A"


def vulnerability_ticket(item: dict[str, Any]) -> tuple[str, str]:
    """Title and markdown body for one vulnerability summary.

    Args:
        item: Entry of ``SbomStats.all_vulnerabilities``

    Returns:
        Tuple of (title, description)
    """
    title = f"Fix {item.get('id')} ({item.get('severity')} - {_first_score(item)})"

    sections = []
    if item.get("recommendation"):
        sections.append(f"## Remediation\n{item['recommendation']}")
    summary = item.get("title") or item.get("description")
    if summary:
        sections.append(f"## Description\n{summary}")
    source_name = (item.get("source") or {}).get("name")
    if source_name:
        sections.append(f"## Source\n{source_name}")
    return title, "\n\n".join(sections)


def component_ticket(item: dict[str, Any]) -> tuple[str, str]:
    """Title and body for one vulnerable component tally."""
    name = item.get("name")
    title = (
        f"Fix {name} ({item.get('critical') or 0}Critical, {item.get('high') or 0}High, "
        f"{item.get('medium') or 0}Medium, {item.get('low') or 0}Low)"
    )
    description = (
        f"Component: {name}\n"
        f"Version: {item.get('version') or 'N/A'}\n"
        f"Total Vulnerabilities: {item.get('total') or 0}"
    )
    return title, description


def generate_ticket_csv(
    items: list[dict[str, Any]],
    mode: TicketMode | str = TicketMode.VULNERABILITIES,
    platform: ExportPlatform | str = ExportPlatform.GENERIC,
) -> str:
    """Render ticket rows as CSV with every field quoted.

    Args:
        items: Vulnerability summaries or vulnerable component tallies
        mode: Which kind of item ``items`` holds
        platform: Tracker whose column headers are used

    Returns:
        CSV text: a header row followed by one row per item
    """
    mode = TicketMode(mode)
    platform = ExportPlatform(platform)
    build_row = vulnerability_ticket if mode is TicketMode.VULNERABILITIES else component_ticket

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(PLATFORM_HEADERS[platform])
    for item in items:
        writer.writerow(build_row(item))

    logger.debug(f"Exported {len(items)} {mode.value} tickets for {platform.value}")
    return buffer.getvalue()


def tickets_from_stats(
    stats: SbomStats,
    mode: TicketMode | str = TicketMode.VULNERABILITIES,
    platform: ExportPlatform | str = ExportPlatform.GENERIC,
) -> str:
    """Export every vulnerability or every vulnerable component of a snapshot."""
    if TicketMode(mode) is TicketMode.VULNERABILITIES:
        items = stats.all_vulnerabilities
    else:
        items = stats.all_vulnerable_components
    return generate_ticket_csv(items, mode, platform)
