"""
Merge command: combine SBOMs of the same software from several tools.
"""

import json
import sys
from pathlib import Path

import click

from ...analysis.merger import merge_sboms
from ...shared.exceptions import SbomAnalyticsError
from ..utils import load_sbom_json, write_text


@click.command()
@click.argument(
    "sbom_paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    "output_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Merged SBOM file",
)
@click.option(
    "--stats/--no-stats",
    "include_stats",
    default=False,
    help="Embed the overlap statistics in the output",
)
@click.pass_context
def merge(ctx, sbom_paths, output_path, include_stats):
    """Merge several SBOMs into the first one, deduplicating by purl."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    try:
        documents = [load_sbom_json(path) for path in sbom_paths]
        result = merge_sboms(documents, [path.name for path in sbom_paths])
        merged = dict(result.document)
        if include_stats:
            merged["x-multi-sbom-stats"] = result.stats.to_dict()
        write_text(output_path, json.dumps(merged, indent=2))

        overlap = result.stats.component_overlap
        for source in result.stats.sources:
            output.info(
                f"  {source.name}: {source.components_found} components, "
                f"{source.vulnerabilities_found} vulnerabilities",
                markup=False,
            )
        output.success(
            f"Merged {len(documents)} SBOMs into {output_path}: "
            f"{overlap.total} components ({overlap.shared} shared)"
        )
        logger.debug(f"Vulnerability overlap: {result.stats.vulnerability_overlap}")

    except SbomAnalyticsError as e:
        logger.error(f"Merge failed: {e}")
        output.error(f"Error: {e}")
        sys.exit(1)
