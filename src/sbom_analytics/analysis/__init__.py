"""
Analysis stages: graph construction, reachability, risk aggregation,
inherent/transitive rollups, developer insights, statistics and ticket export.
"""

from .engine import AnalysisResult, AnalysisSession, analyze, analyze_sync
from .graph_builder import DependencyGraph, GraphBuilder
from .insights import DeveloperInsightsAnalyzer
from .merger import SbomMerger, merge_sboms
from .reachability import ReachabilityAnalyzer, ancestors, depth_from_root, path_to_root
from .risk import RiskAggregator, RiskProfile
from .stats import SbomStats
from .tickets import ExportPlatform, TicketMode, generate_ticket_csv, tickets_from_stats
from .tree_formatter import EnhancedComponent, FormattedSbom, TreeFormatter

__all__ = [
    "AnalysisResult",
    "AnalysisSession",
    "analyze",
    "analyze_sync",
    "DependencyGraph",
    "GraphBuilder",
    "DeveloperInsightsAnalyzer",
    "SbomMerger",
    "merge_sboms",
    "ReachabilityAnalyzer",
    "ancestors",
    "depth_from_root",
    "path_to_root",
    "RiskAggregator",
    "RiskProfile",
    "SbomStats",
    "ExportPlatform",
    "TicketMode",
    "generate_ticket_csv",
    "tickets_from_stats",
    "EnhancedComponent",
    "FormattedSbom",
    "TreeFormatter",
]
