"""
Core data models for SBOM analytics using simple dataclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SeverityLevel(str, Enum):
    """Resolved finding severities, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Position in the severity order; 0 is the most severe."""
        return SEVERITY_ORDER.index(self)

    @property
    def bucket(self) -> str | None:
        """Title-cased bucket name used by per-component splits."""
        if self is SeverityLevel.NONE:
            return None
        return self.value.capitalize()


SEVERITY_ORDER: tuple[SeverityLevel, ...] = (
    SeverityLevel.CRITICAL,
    SeverityLevel.HIGH,
    SeverityLevel.MEDIUM,
    SeverityLevel.LOW,
    SeverityLevel.NONE,
)

# Buckets of the inherent/transitive split, most severe first
SEVERITY_BUCKETS: tuple[str, ...] = ("Critical", "High", "Medium", "Low")


class LicenseCategory(str, Enum):
    """License families used by the distribution histograms."""

    PERMISSIVE = "permissive"
    COPYLEFT = "copyleft"
    WEAK_COPYLEFT = "weak-copyleft"
    PROPRIETARY = "proprietary"
    UNKNOWN = "unknown"

    @property
    def distribution_key(self) -> str:
        """Key of this category in a license distribution dictionary."""
        return self.value.replace("-", "_")


def empty_license_distribution() -> dict[str, int]:
    """Return a zeroed five-category license distribution."""
    return {category.distribution_key: 0 for category in LicenseCategory}


def empty_severity_buckets() -> dict[str, list["ResolvedFinding"]]:
    """Return empty Critical/High/Medium/Low finding buckets."""
    return {bucket: [] for bucket in SEVERITY_BUCKETS}


@dataclass(frozen=True)
class License:
    """A declared license; SPDX id, free-text name, or an expression."""

    id: str | None = None
    name: str | None = None
    expression: str | None = None
    url: str | None = None

    @property
    def key(self) -> str | None:
        """Identifier used for categorization and deduplication."""
        return self.id or self.name or self.expression

    @property
    def display_name(self) -> str:
        """Human readable name, falling back to the identifier."""
        return self.name or self.id or self.expression or "Unknown"


@dataclass
class Rating:
    """One severity rating attached to a finding."""

    severity: str | None = None
    score: float | None = None
    method: str | None = None
    vector: str | None = None


@dataclass
class Affect:
    """A component reference affected by a finding."""

    ref: str
    versions: list[Any] = field(default_factory=list)


@dataclass
class Finding:
    """A vulnerability record as it applies to one or more components."""

    id: str | None = None
    ratings: list[Rating] = field(default_factory=list)
    affects: list[Affect] = field(default_factory=list)
    description: str | None = None
    detail: str | None = None
    recommendation: str | None = None
    advisories: list[dict[str, Any]] = field(default_factory=list)
    cwes: list[int] = field(default_factory=list)
    source: dict[str, Any] | None = None
    references: list[dict[str, Any]] = field(default_factory=list)
    analysis: dict[str, Any] | None = None
    created: str | None = None
    published: str | None = None
    updated: str | None = None
    rejected: str | None = None
    proof_of_concept: dict[str, Any] | None = None

    @property
    def affected_refs(self) -> list[str]:
        """Distinct affected refs in first-seen order."""
        return list(dict.fromkeys(affect.ref for affect in self.affects))


@dataclass
class Component:
    """Canonical component record."""

    ref: str | None = None
    name: str = ""
    version: str | None = None
    group: str | None = None
    purl: str | None = None
    type: str = "library"
    description: str | None = None
    licenses: list[License] = field(default_factory=list)
    hashes: list[Any] = field(default_factory=list)
    properties: list[Any] = field(default_factory=list)
    supplier: Any = None
    dependencies: list[str] = field(default_factory=list)

    @property
    def identity(self) -> str | None:
        """Graph identity: the ref when present, else the name."""
        return self.ref or self.name or None


@dataclass
class DependencyRecord:
    """Top-level dependency entry: a ref and the refs it depends on."""

    ref: str
    depends_on: list[str] = field(default_factory=list)


@dataclass
class SbomDocument:
    """Canonicalized SBOM snapshot consumed by every analysis stage."""

    components: list[Component] = field(default_factory=list)
    dependencies: list[DependencyRecord] = field(default_factory=list)
    vulnerabilities: list[Finding] = field(default_factory=list)
    metadata_component: Component | None = None
    tools: list[Any] = field(default_factory=list)
    authors: list[Any] = field(default_factory=list)

    @property
    def root_ref(self) -> str | None:
        """Identity of the designated root component, if any."""
        if self.metadata_component is None:
            return None
        return self.metadata_component.identity


@dataclass
class AnalysisConfig:
    """Configuration for an analysis run."""

    chunk_size: int = 250  # Items processed between yield points
    transitive_chunk_size: int = 50  # Smaller chunks for graph traversal work
    top_n: int = 5  # Length of the top licenses / top vulnerable components lists
    large_sbom_threshold: int = 15000


@dataclass
class DiagramOptions:
    """Options for the dependency diagram export."""

    max_depth: int = 3
    query: str = ""
    prune_non_matches: bool = False
    show_vulnerable_only: bool = False
    max_nodes: int = 320
    max_edges: int = 640
    max_label_length: int = 160
    root_refs: list[str] | None = None


@dataclass
class ResolvedFinding:
    """A finding merged by id, with its single resolved severity."""

    key: str  # Grouping key; the id, or a synthetic key for id-less findings
    id: str
    severity: SeverityLevel
    finding: Finding
    affected_refs: list[str] = field(default_factory=list)

    @property
    def bucket(self) -> str | None:
        return self.severity.bucket
