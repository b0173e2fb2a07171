"""
Tests for license categorization and descriptions.
"""

import pytest

from sbom_analytics.analysis.licenses import (
    LICENSE_DESCRIPTIONS,
    categorize_license,
    describe_license,
    license_category,
)
from sbom_analytics.shared.models import License, LicenseCategory


class TestCategorizeLicense:
    """Tests for categorize_license."""

    @pytest.mark.parametrize(
        "license_id,expected",
        [
            ("MIT", LicenseCategory.PERMISSIVE),
            ("Apache-2.0", LicenseCategory.PERMISSIVE),
            ("0BSD", LicenseCategory.PERMISSIVE),
            ("GPL-3.0-only", LicenseCategory.COPYLEFT),
            ("AGPL-3.0-or-later", LicenseCategory.COPYLEFT),
            ("LGPL-2.1-only", LicenseCategory.WEAK_COPYLEFT),
            ("MPL-2.0", LicenseCategory.WEAK_COPYLEFT),
            ("EPL-1.0", LicenseCategory.WEAK_COPYLEFT),
        ],
    )
    def test_exact_identifiers(self, license_id, expected) -> None:
        """Test SPDX identifiers from the lookup table."""
        assert categorize_license(license_id) is expected

    @pytest.mark.parametrize(
        "license_id,expected",
        [
            ("GPL-2.0+", LicenseCategory.COPYLEFT),
            ("LGPL-2.1+", LicenseCategory.WEAK_COPYLEFT),
            ("Apache 2", LicenseCategory.PERMISSIVE),
            ("bsd-4-clause", LicenseCategory.PERMISSIVE),
            ("MPL-1.1", LicenseCategory.WEAK_COPYLEFT),
        ],
    )
    def test_prefix_heuristics(self, license_id, expected) -> None:
        """Test non-canonical identifiers fall back to prefixes."""
        assert categorize_license(license_id) is expected

    @pytest.mark.parametrize("license_id", [None, "", "Proprietary", "Zlib"])
    def test_unknown(self, license_id) -> None:
        """Test unmatched identifiers are unknown."""
        assert categorize_license(license_id) is LicenseCategory.UNKNOWN

    def test_license_category_uses_key(self) -> None:
        """Test parsed licenses are categorized by id, then name, then expression."""
        assert license_category(License(id="MIT", name="GPL")) is LicenseCategory.PERMISSIVE
        assert license_category(License(name="GPL-2.0")) is LicenseCategory.COPYLEFT
        assert license_category(License(expression="MIT OR X")) is LicenseCategory.PERMISSIVE
        assert license_category(License()) is LicenseCategory.UNKNOWN


class TestDescribeLicense:
    """Tests for describe_license."""

    def test_exact_description(self) -> None:
        """Test an identifier with its own description."""
        assert describe_license("MIT") == LICENSE_DESCRIPTIONS["MIT"]

    def test_lesser_gpl_is_not_described_as_gpl(self) -> None:
        """Test LGPL variants get the Lesser GPL description."""
        assert describe_license("LGPL-3.0-or-later") == LICENSE_DESCRIPTIONS["LGPL-3.0-only"]
        assert describe_license("LGPL-2.1-only") == LICENSE_DESCRIPTIONS["LGPL-3.0-only"]

    def test_versioned_gpl(self) -> None:
        """Test GPL variants match their version family."""
        assert describe_license("GPL-3.0-or-later") == LICENSE_DESCRIPTIONS["GPL-3.0-only"]
        assert describe_license("GPL-2.0+") == LICENSE_DESCRIPTIONS["GPL-2.0-only"]

    def test_fallback(self) -> None:
        """Test the generic summary for undescribed licenses."""
        assert describe_license("Zlib") == (
            "No detailed summary available for Zlib. It is categorized as unknown."
        )

    def test_missing(self) -> None:
        """Test the text for a missing license."""
        assert describe_license(None) == "No license information available."
