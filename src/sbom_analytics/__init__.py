"""
SBOM Analytics - relationship and risk aggregation for CycloneDX SBOMs.

This package provides functionality for:
- Canonical dependency and reverse-dependency graphs
- Blast radius and reachability analysis
- Inherent vs. transitive vulnerability and license rollups
- Aggregate statistics and developer insights
- Size-bounded Mermaid dependency diagrams
"""

from .analysis.engine import AnalysisResult, AnalysisSession, analyze, analyze_sync
from .shared.exceptions import SbomAnalyticsError
from .shared.models import AnalysisConfig, DiagramOptions

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AnalysisConfig",
    "AnalysisResult",
    "AnalysisSession",
    "DiagramOptions",
    "SbomAnalyticsError",
    "analyze",
    "analyze_sync",
]
