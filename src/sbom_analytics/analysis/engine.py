"""
Orchestration of a full analysis pass over one SBOM snapshot.

Each pass is a pure function of its input: every stage builds fresh
structures and memoization never outlives the pass. Stages yield to the
event loop between chunks, report progress, and abandon work as soon as a
newer input supersedes them.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

from ..shared.async_utils import Checkpoint, ProgressCallback, StillWanted
from ..shared.collections import canonicalize_document
from ..shared.exceptions import (
    AnalysisCancelledError,
    AnalysisFailedError,
    SbomAnalyticsError,
    create_error_context,
)
from ..shared.models import AnalysisConfig, DiagramOptions, SbomDocument
from ..visualization.diagram import DiagramResult, build_mermaid_diagram
from .graph_builder import DependencyGraph, GraphBuilder
from .insights import DeveloperInsightsAnalyzer
from .reachability import ReachabilityAnalyzer, ancestors, depth_from_root, path_to_root
from .risk import RiskAggregator, RiskProfile
from .stats import SbomStats, build_stats
from .tree_formatter import FormattedSbom, TreeFormatter

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Every structure derived from one SBOM snapshot."""

    document: SbomDocument
    graph: DependencyGraph
    risk: RiskProfile
    formatted: FormattedSbom
    stats: SbomStats
    depths: dict[str, int]

    @property
    def blast_radius(self) -> dict[str, int]:
        return self.formatted.blast_radius

    def ancestors(self, ref: str) -> set[str]:
        return ancestors(self.graph, ref)

    def path_to_root(self, ref: str) -> list[str] | None:
        return path_to_root(self.graph, ref)

    def diagram(self, options: DiagramOptions | None = None) -> DiagramResult:
        """Build the Mermaid diagram for this snapshot."""
        return build_mermaid_diagram(self.formatted, options)


async def analyze(
    raw_document: Any,
    config: AnalysisConfig | None = None,
    on_progress: ProgressCallback | None = None,
    still_wanted: StillWanted | None = None,
) -> AnalysisResult:
    """Run the full analysis pipeline on a raw SBOM document.

    Args:
        raw_document: Parsed CycloneDX JSON (or an object with the same shape)
        config: Analysis configuration
        on_progress: Optional ``(percent, message)`` callback
        still_wanted: Optional check polled at every yield point

    Returns:
        AnalysisResult for the snapshot

    Raises:
        InvalidDocumentError: If the input is not an object at all
        AnalysisCancelledError: If ``still_wanted`` returned false
        AnalysisFailedError: If any stage failed unexpectedly
    """
    config = config or AnalysisConfig()
    checkpoint = Checkpoint(still_wanted, on_progress)
    stage = "canonicalize"
    started = time.perf_counter()

    try:
        checkpoint.report(0, "Initializing analysis...")
        checkpoint.ensure_wanted()
        document = canonicalize_document(raw_document)
        await checkpoint()

        stage = "graph"
        checkpoint.report(5, "Building dependency graph...")
        graph = await GraphBuilder().build_async(document, checkpoint, config.chunk_size)

        stage = "risk"
        checkpoint.report(10, "Analyzing vulnerabilities and licenses...")
        profile = await RiskAggregator().aggregate_async(
            document.vulnerabilities, graph.components, checkpoint, config.chunk_size
        )

        stage = "reachability"
        checkpoint.report(18, "Computing blast radius...")
        blast_radius = await ReachabilityAnalyzer(graph).compute_blast_radius(
            checkpoint, config.transitive_chunk_size
        )
        depths = depth_from_root(graph, document.root_ref)
        await checkpoint()

        stage = "insights"
        checkpoint.report(25, "Collecting developer insights...")
        developer_stats = DeveloperInsightsAnalyzer().analyze(document, document.components)
        await checkpoint()

        stage = "transitive"
        checkpoint.report(50, "Transitive analysis...")
        formatted = await TreeFormatter(graph, profile).format(
            blast_radius,
            root_ref=document.root_ref,
            checkpoint=checkpoint,
            chunk_size=config.transitive_chunk_size,
        )

        stage = "stats"
        stats = build_stats(graph, profile, depths, developer_stats, config)
        await checkpoint()
    except SbomAnalyticsError:
        raise
    except Exception as e:
        logger.error(f"Analysis failed during {stage}: {e}")
        raise AnalysisFailedError(
            f"Analysis failed: {e}",
            create_error_context(stage=stage, original_error=type(e).__name__),
        ) from e

    checkpoint.report(100, "Ready")
    logger.info(
        f"Analysis complete: {stats.total_components} components, "
        f"{stats.unique_vulnerability_count} unique vulnerabilities "
        f"in {time.perf_counter() - started:.2f}s"
    )
    return AnalysisResult(
        document=document,
        graph=graph,
        risk=profile,
        formatted=formatted,
        stats=stats,
        depths=depths,
    )


def analyze_sync(
    raw_document: Any,
    config: AnalysisConfig | None = None,
    on_progress: ProgressCallback | None = None,
) -> AnalysisResult:
    """Run :func:`analyze` on a fresh event loop."""
    return asyncio.run(analyze(raw_document, config, on_progress))


class AnalysisSession:
    """Last-write-wins wrapper around :func:`analyze`.

    Submitting a new document supersedes any pass still in flight; the
    superseded pass raises :class:`AnalysisCancelledError` at its next yield
    point and never publishes a result.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ):
        self.config = config or AnalysisConfig()
        self.on_progress = on_progress
        self.latest: AnalysisResult | None = None
        self._generation = 0
        self.logger = logging.getLogger(__name__)

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self) -> None:
        """Supersede the pass in flight without starting a new one."""
        self._generation += 1

    async def submit(self, raw_document: Any) -> AnalysisResult:
        """Analyze a document, superseding earlier submissions.

        Raises:
            AnalysisCancelledError: If a newer submission arrived first
        """
        self._generation += 1
        generation = self._generation

        def still_wanted() -> bool:
            return generation == self._generation

        try:
            result = await analyze(raw_document, self.config, self.on_progress, still_wanted)
        except AnalysisCancelledError:
            self.logger.debug(f"Analysis generation {generation} superseded")
            raise

        if not still_wanted():
            raise AnalysisCancelledError(
                "Analysis superseded by newer input", create_error_context(generation=generation)
            )
        self.latest = result
        return result
