"""
Tests for core data models.
"""

from sbom_analytics.shared.models import (
    SEVERITY_BUCKETS,
    SEVERITY_ORDER,
    Affect,
    AnalysisConfig,
    Component,
    DiagramOptions,
    Finding,
    License,
    LicenseCategory,
    SbomDocument,
    SeverityLevel,
    empty_license_distribution,
    empty_severity_buckets,
)


class TestSeverityLevel:
    """Tests for SeverityLevel enum."""

    def test_severity_values(self) -> None:
        """Test severity level values."""
        assert SeverityLevel.CRITICAL.value == "critical"
        assert SeverityLevel.HIGH.value == "high"
        assert SeverityLevel.MEDIUM.value == "medium"
        assert SeverityLevel.LOW.value == "low"
        assert SeverityLevel.NONE.value == "none"

    def test_severity_is_string_enum(self) -> None:
        """Test that severity is a string enum."""
        assert isinstance(SeverityLevel.HIGH, str)
        assert SeverityLevel.HIGH == "high"

    def test_rank_follows_order(self) -> None:
        """Test that rank orders severities most severe first."""
        ranks = [level.rank for level in SEVERITY_ORDER]
        assert ranks == sorted(ranks)
        assert SeverityLevel.CRITICAL.rank < SeverityLevel.NONE.rank

    def test_bucket_names(self) -> None:
        """Test title-cased bucket names and the missing bucket for none."""
        assert [level.bucket for level in SEVERITY_ORDER[:4]] == list(SEVERITY_BUCKETS)
        assert SeverityLevel.NONE.bucket is None


class TestLicenseModels:
    """Tests for License and LicenseCategory."""

    def test_distribution_keys(self) -> None:
        """Test that weak-copyleft maps onto an underscore key."""
        assert LicenseCategory.WEAK_COPYLEFT.distribution_key == "weak_copyleft"
        assert set(empty_license_distribution()) == {
            "permissive",
            "copyleft",
            "weak_copyleft",
            "proprietary",
            "unknown",
        }

    def test_license_key_precedence(self) -> None:
        """Test that the key prefers id, then name, then expression."""
        assert License(id="MIT", name="MIT License").key == "MIT"
        assert License(name="Custom").key == "Custom"
        assert License(expression="MIT OR Apache-2.0").key == "MIT OR Apache-2.0"
        assert License().key is None

    def test_display_name(self) -> None:
        """Test display name fallbacks."""
        assert License(id="MIT", name="MIT License").display_name == "MIT License"
        assert License(id="MIT").display_name == "MIT"
        assert License().display_name == "Unknown"


class TestComponentModel:
    """Tests for Component and Finding models."""

    def test_minimal_creation(self) -> None:
        """Test creating component with minimal fields."""
        component = Component(name="requests")
        assert component.ref is None
        assert component.type == "library"
        assert component.licenses == []
        assert component.dependencies == []

    def test_identity_prefers_ref(self) -> None:
        """Test that identity uses the ref, then the name."""
        assert Component(ref="pkg:pypi/a@1", name="a").identity == "pkg:pypi/a@1"
        assert Component(name="a").identity == "a"
        assert Component().identity is None

    def test_affected_refs_are_distinct(self) -> None:
        """Test that repeated affects collapse in first-seen order."""
        finding = Finding(id="CVE-1", affects=[Affect("b"), Affect("a"), Affect("b")])
        assert finding.affected_refs == ["b", "a"]

    def test_document_root_ref(self) -> None:
        """Test the root ref comes from the metadata component."""
        assert SbomDocument().root_ref is None
        document = SbomDocument(metadata_component=Component(ref="app", name="demo"))
        assert document.root_ref == "app"


class TestConfigModels:
    """Tests for configuration defaults."""

    def test_analysis_config_defaults(self) -> None:
        """Test analysis configuration defaults."""
        config = AnalysisConfig()
        assert config.chunk_size == 250
        assert config.transitive_chunk_size == 50
        assert config.top_n == 5
        assert config.large_sbom_threshold == 15000

    def test_diagram_options_defaults(self) -> None:
        """Test diagram option defaults."""
        options = DiagramOptions()
        assert options.max_depth == 3
        assert options.max_nodes == 320
        assert options.max_edges == 640
        assert options.max_label_length == 160
        assert options.query == ""
        assert options.root_refs is None

    def test_empty_buckets_are_independent(self) -> None:
        """Test that each call returns fresh bucket lists."""
        first = empty_severity_buckets()
        first["High"].append("x")
        assert empty_severity_buckets()["High"] == []
