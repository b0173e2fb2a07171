"""
Analysis command: statistics, risk and developer insights for one SBOM.
"""

import json
import sys
from pathlib import Path

import click

from ...analysis.engine import analyze_sync
from ...shared.exceptions import SbomAnalyticsError
from ...shared.logging import ProgressLogger
from ...shared.models import AnalysisConfig
from ..utils import load_sbom_json


@click.command()
@click.argument("sbom_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the full statistics as JSON")
@click.option(
    "--top", default=5, show_default=True, type=click.IntRange(min=1), help="Length of top-N lists"
)
@click.pass_context
def analyze(ctx, sbom_path, as_json, top):
    """Analyze an SBOM: severities, licenses, blast radius and metadata quality."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    try:
        raw = load_sbom_json(sbom_path)
        show_progress = not (as_json or output.is_quiet)
        progress = ProgressLogger(logger) if show_progress else None
        result = analyze_sync(raw, AnalysisConfig(top_n=top), on_progress=progress)

        if as_json:
            output.print_raw(json.dumps(result.stats.to_dict(), indent=2, default=str))
        else:
            output.print_stats(result.stats, top=top)
            widest = sorted(result.blast_radius.items(), key=lambda item: -item[1])[:top]
            for ref, count in widest:
                if count:
                    output.info(f"  blast radius {count:>5}  {ref}", markup=False)

        logger.info(f"Analyzed {sbom_path}")

    except SbomAnalyticsError as e:
        logger.error(f"Analysis failed: {e}")
        output.error(f"Error: {e}")
        sys.exit(1)
