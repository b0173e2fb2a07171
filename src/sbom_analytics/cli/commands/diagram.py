"""
Diagram command: export the dependency tree as a Mermaid flowchart.
"""

import sys
from pathlib import Path

import click

from ...analysis.engine import analyze_sync
from ...shared.exceptions import SbomAnalyticsError
from ...shared.models import DiagramOptions
from ..utils import load_sbom_json, write_text


@click.command()
@click.argument("sbom_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--max-depth", default=3, show_default=True, type=int, help="Levels expanded below each root"
)
@click.option("--query", default="", help="Case-insensitive filter over name, group, ref and purl")
@click.option("--prune", is_flag=True, help="Keep only subtrees that match --query")
@click.option(
    "--vulnerable-only", is_flag=True, help="Only roots with vulnerabilities in their subtree"
)
@click.option("--max-nodes", default=320, show_default=True, type=int, help="Node budget")
@click.option("--max-edges", default=640, show_default=True, type=int, help="Edge budget")
@click.option(
    "--max-label-length",
    default=160,
    show_default=True,
    type=int,
    help="Longest node label before it is shortened",
)
@click.option("--root", "roots", multiple=True, help="Root ref to start from (repeatable)")
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the diagram to a file",
)
@click.pass_context
def diagram(
    ctx,
    sbom_path,
    max_depth,
    query,
    prune,
    vulnerable_only,
    max_nodes,
    max_edges,
    max_label_length,
    roots,
    output_path,
):
    """Export the dependency tree of an SBOM as a Mermaid flowchart."""
    logger = ctx.obj["logger"]
    output = ctx.obj["output"]

    try:
        raw = load_sbom_json(sbom_path)
        result = analyze_sync(raw)
        options = DiagramOptions(
            max_depth=max_depth,
            query=query,
            prune_non_matches=prune,
            show_vulnerable_only=vulnerable_only,
            max_nodes=max_nodes,
            max_edges=max_edges,
            max_label_length=max_label_length,
            root_refs=list(roots) or None,
        )
        built = result.diagram(options)

        if output_path:
            write_text(output_path, built.diagram + "\n")
            output.success(f"Diagram written to {output_path}")
        else:
            output.print_raw(built.diagram)

        summary = f"{built.node_count} nodes, {built.edge_count} edges"
        if built.truncated:
            output.warning(
                f"Diagram truncated at {summary} (limits {built.max_nodes}/{built.max_edges})"
            )
        else:
            logger.info(f"Diagram built: {summary}")

    except SbomAnalyticsError as e:
        logger.error(f"Diagram export failed: {e}")
        output.error(f"Error: {e}")
        sys.exit(1)
