"""
Ticket export command: CSV rows for importing findings into an issue tracker.
"""

import sys
from pathlib import Path

import click

from ...analysis.engine import analyze_sync
from ...analysis.tickets import ExportPlatform, TicketMode, tickets_from_stats
from ...shared.exceptions import SbomAnalyticsError
from ..utils import load_sbom_json, write_text


@click.command("export-tickets")
@click.argument("sbom_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--mode",
    type=click.Choice([mode.value for mode in TicketMode]),
    default=TicketMode.VULNERABILITIES.value,
    show_default=True,
    help="One ticket per vulnerability or per vulnerable component",
)
@click.option(
    "--platform",
    type=click.Choice([platform.value for platform in ExportPlatform], case_sensitive=False),
    default=ExportPlatform.GENERIC.value,
    show_default=True,
    help="Issue tracker whose CSV column names are used",
)
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the CSV to a file",
)
@click.pass_context
def export_tickets(ctx, sbom_path, mode, platform, output_path):
    """Export vulnerabilities of an SBOM as issue-tracker tickets (CSV)."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    try:
        raw = load_sbom_json(sbom_path)
        stats = analyze_sync(raw).stats
        # Choice with case_sensitive=False returns the canonical spelling
        content = tickets_from_stats(stats, mode, platform)

        if output_path:
            write_text(output_path, content)
            output.success(f"Tickets written to {output_path}")
        else:
            output.print_raw(content.rstrip("\n"))
        logger.info(f"Exported {mode} tickets for {platform}")

    except SbomAnalyticsError as e:
        logger.error(f"Ticket export failed: {e}")
        output.error(f"Error: {e}")
        sys.exit(1)
