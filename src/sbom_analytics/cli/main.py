"""
CLI interface for SBOM analytics using Click.
"""

from typing import Any

import click

from ..shared.logging import get_logger, setup_logging
from .commands.analyze import analyze
from .commands.diagram import diagram
from .commands.merge import merge
from .commands.tickets import export_tickets
from .output import create_output_manager


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode")
@click.pass_context
def cli(ctx: Any, verbose: bool, quiet: bool) -> None:
    """SBOM Analytics - dependency, blast radius and risk analysis for CycloneDX SBOMs."""
    ctx.ensure_object(dict)

    ctx.obj["global_flags"] = {"verbose": verbose, "quiet": quiet}

    if quiet:
        log_level = "WARNING"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    setup_logging(log_level)
    ctx.obj["logger"] = get_logger()
    ctx.obj["output"] = create_output_manager(quiet=quiet, verbose=verbose)


cli.add_command(analyze)
cli.add_command(diagram)
cli.add_command(merge)
cli.add_command(export_tickets)


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
