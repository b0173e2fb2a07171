"""
Centralized CLI output management.

Provides consistent output handling across all CLI commands with respect for
global --quiet and --verbose flags.
"""

from enum import Enum

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..analysis.stats import SbomStats
from ..shared.models import SEVERITY_ORDER

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
    "none": "dim",
}


class OutputLevel(Enum):
    """Output verbosity levels."""

    QUIET = "quiet"  # Only errors and final results
    NORMAL = "normal"
    VERBOSE = "verbose"  # Includes debug details


class CLIOutputManager:
    """Centralized output manager for CLI commands."""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, use_colors: bool = True):
        self.level = level
        self.console = Console(
            stderr=False, no_color=not use_colors, quiet=(level == OutputLevel.QUIET)
        )
        self.error_console = Console(stderr=True, no_color=not use_colors)

    def info(self, message: str, **kwargs) -> None:
        """Print informational message."""
        self.console.print(message, **kwargs)

    def success(self, message: str, **kwargs) -> None:
        self.console.print(f"✓ {message}", style="green", **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.error_console.print(f"⚠️  {message}", style="yellow", **kwargs)

    def error(self, message: str, **kwargs) -> None:
        """Print error message (always shown regardless of quiet mode)."""
        self.error_console.print(f"✗ {message}", style="red bold", **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """Print debug message (only in verbose mode)."""
        if self.level != OutputLevel.VERBOSE:
            return
        self.console.print(f"🔍 {message}", style="dim", **kwargs)

    def print_raw(self, message: str) -> None:
        """Print unformatted text, e.g. JSON or diagram source (always shown)."""
        click.echo(message)

    @property
    def is_quiet(self) -> bool:
        return self.level == OutputLevel.QUIET

    @property
    def is_verbose(self) -> bool:
        return self.level == OutputLevel.VERBOSE

    def print_stats(self, stats: SbomStats, top: int = 5) -> None:
        """Render the headline statistics as rich tables."""
        self.console.print(
            f"[bold]{stats.total_components}[/bold] components "
            f"({stats.dependency_stats['direct']} direct, "
            f"{stats.dependency_stats['transitive']} transitive), "
            f"[bold]{stats.unique_vulnerability_count}[/bold] unique vulnerabilities"
        )

        severity_table = Table(title="Vulnerability occurrences by severity")
        severity_table.add_column("Severity")
        severity_table.add_column("Count", justify="right")
        for level in SEVERITY_ORDER:
            severity_table.add_row(
                level.value.capitalize(),
                str(stats.vulnerability_counts.get(level.value, 0)),
                style=SEVERITY_STYLES[level.value],
            )
        self.console.print(severity_table)

        license_table = Table(title="License distribution")
        license_table.add_column("Category")
        license_table.add_column("Count", justify="right")
        for category, count in stats.license_distribution.items():
            license_table.add_row(category.replace("_", "-"), str(count))
        self.console.print(license_table)

        if stats.all_vulnerable_components:
            component_table = Table(title=f"Top {top} vulnerable components")
            for column in ("Component", "Version", "Critical", "High", "Medium", "Low", "Total"):
                justify = "left" if column in ("Component", "Version") else "right"
                component_table.add_column(column, justify=justify)
            for item in stats.all_vulnerable_components[:top]:
                component_table.add_row(
                    escape(item["name"]),
                    escape(item["version"]),
                    str(item["critical"]),
                    str(item["high"]),
                    str(item["medium"]),
                    str(item["low"]),
                    str(item["total"]),
                )
            self.console.print(component_table)

        conflicts = stats.developer_stats.version_conflicts
        if conflicts:
            conflict_table = Table(title="Version conflicts")
            conflict_table.add_column("Name")
            conflict_table.add_column("Versions")
            for conflict in conflicts[:top]:
                conflict_table.add_row(escape(conflict.name), escape(", ".join(conflict.versions)))
            self.console.print(conflict_table)

        quality = stats.developer_stats.metadata_quality
        passed = [name for name, ok in quality.checks.items() if ok]
        self.console.print(
            f"Metadata quality: grade [bold]{quality.grade}[/bold] "
            f"({quality.score}/100; passing: {', '.join(passed) or 'none'})"
        )


def create_output_manager(
    quiet: bool = False, verbose: bool = False, use_colors: bool = True
) -> CLIOutputManager:
    """Create an output manager from the global CLI flags."""
    if quiet:
        level = OutputLevel.QUIET
    elif verbose:
        level = OutputLevel.VERBOSE
    else:
        level = OutputLevel.NORMAL
    return CLIOutputManager(level=level, use_colors=use_colors)
