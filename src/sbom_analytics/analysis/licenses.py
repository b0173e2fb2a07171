"""
License categorization and short human-readable descriptions.
"""

from ..shared.models import License, LicenseCategory

# Exact SPDX identifiers with a known category
LICENSE_CATEGORIES: dict[str, LicenseCategory] = {
    # Permissive
    "MIT": LicenseCategory.PERMISSIVE,
    "ISC": LicenseCategory.PERMISSIVE,
    "Apache-2.0": LicenseCategory.PERMISSIVE,
    "BSD-2-Clause": LicenseCategory.PERMISSIVE,
    "BSD-3-Clause": LicenseCategory.PERMISSIVE,
    "CC0-1.0": LicenseCategory.PERMISSIVE,
    "Unlicense": LicenseCategory.PERMISSIVE,
    "0BSD": LicenseCategory.PERMISSIVE,
    # Copyleft
    "GPL-1.0-only": LicenseCategory.COPYLEFT,
    "GPL-1.0-or-later": LicenseCategory.COPYLEFT,
    "GPL-2.0-only": LicenseCategory.COPYLEFT,
    "GPL-2.0-or-later": LicenseCategory.COPYLEFT,
    "GPL-3.0-only": LicenseCategory.COPYLEFT,
    "GPL-3.0-or-later": LicenseCategory.COPYLEFT,
    "AGPL-3.0-only": LicenseCategory.COPYLEFT,
    "AGPL-3.0-or-later": LicenseCategory.COPYLEFT,
    # Weak copyleft
    "LGPL-2.0-only": LicenseCategory.WEAK_COPYLEFT,
    "LGPL-2.0-or-later": LicenseCategory.WEAK_COPYLEFT,
    "LGPL-2.1-only": LicenseCategory.WEAK_COPYLEFT,
    "LGPL-2.1-or-later": LicenseCategory.WEAK_COPYLEFT,
    "LGPL-3.0-only": LicenseCategory.WEAK_COPYLEFT,
    "LGPL-3.0-or-later": LicenseCategory.WEAK_COPYLEFT,
    "MPL-2.0": LicenseCategory.WEAK_COPYLEFT,
    "EPL-1.0": LicenseCategory.WEAK_COPYLEFT,
    "EPL-2.0": LicenseCategory.WEAK_COPYLEFT,
}

# Checked in order; the first matching prefix wins
_PREFIX_CATEGORIES: tuple[tuple[tuple[str, ...], LicenseCategory], ...] = (
    (("GPL", "AGPL"), LicenseCategory.COPYLEFT),
    (("LGPL", "MPL", "EPL"), LicenseCategory.WEAK_COPYLEFT),
    (("MIT", "APACHE", "BSD", "ISC"), LicenseCategory.PERMISSIVE),
)

LICENSE_DESCRIPTIONS: dict[str, str] = {
    "MIT": (
        "A short and simple permissive license with conditions only requiring "
        "preservation of copyright and license notices. Licensed works, modifications, "
        "and larger works may be distributed under different terms and without source code."
    ),
    "Apache-2.0": (
        "A permissive license whose main conditions require preservation of copyright "
        "and license notices. Licensed works, modifications, and larger works may be "
        "distributed under different terms and without source code."
    ),
    "GPL-3.0-only": (
        "The GNU General Public License is a free, copyleft license for software and "
        "other kinds of works. It requires that the full source code be made available "
        "and that any derivative works be licensed under the same terms."
    ),
    "GPL-2.0-only": (
        "A legacy version of the GPL license. It requires that the full source code be "
        "made available and that any derivative works be licensed under the same terms."
    ),
    "LGPL-3.0-only": (
        "The Lesser GPL allows the work to be used in proprietary software. If you "
        "modify the library, those modifications must be released under LGPL."
    ),
    "BSD-3-Clause": (
        "A permissive license that allows unlimited redistribution for any purpose as "
        "long as its copyright notices and the license's disclaimers of warranty are "
        "maintained."
    ),
    "BSD-2-Clause": "Similar to the 3-clause BSD license but without the non-endorsement clause.",
    "ISC": (
        "A permissive license functionally equivalent to the Simplified BSD and MIT "
        "licenses, but with language deemed unnecessary by the Berne Convention removed."
    ),
    "MPL-2.0": (
        "A weak copyleft license that allows the software to be used in proprietary "
        "products, but requires modifications to MPL-licensed files to be released "
        "under the MPL."
    ),
    "EPL-2.0": (
        "A weak copyleft license that allows the software to be used in proprietary "
        "products, but requires modifications to EPL-licensed files to be released "
        "under the EPL."
    ),
}

# Substring -> description key; LGPL is tested before the GPL versions
_DESCRIPTION_FRAGMENTS: tuple[tuple[str, str], ...] = (
    ("MIT", "MIT"),
    ("APACHE", "Apache-2.0"),
    ("LGPL", "LGPL-3.0-only"),
    ("GPL-3", "GPL-3.0-only"),
    ("GPL-2", "GPL-2.0-only"),
    ("BSD-3", "BSD-3-Clause"),
    ("BSD-2", "BSD-2-Clause"),
    ("ISC", "ISC"),
    ("MPL", "MPL-2.0"),
    ("EPL", "EPL-2.0"),
)


def categorize_license(license_id: str | None) -> LicenseCategory:
    """Determine the category of a license identifier.

    Exact SPDX matches are tried first, then prefix heuristics for
    versioned or non-canonical identifiers.

    Args:
        license_id: SPDX identifier or free-text license name

    Returns:
        License category; ``unknown`` when nothing matches
    """
    if not license_id:
        return LicenseCategory.UNKNOWN

    if license_id in LICENSE_CATEGORIES:
        return LICENSE_CATEGORIES[license_id]

    upper = license_id.upper()
    for prefixes, category in _PREFIX_CATEGORIES:
        if upper.startswith(prefixes):
            return category

    return LicenseCategory.UNKNOWN


def license_category(license_: License) -> LicenseCategory:
    """Category of a parsed license, keyed by its id, then name, then expression."""
    return categorize_license(license_.key)


def describe_license(license_id: str | None) -> str:
    """Return a short human summary of a license."""
    if not license_id:
        return "No license information available."

    if license_id in LICENSE_DESCRIPTIONS:
        return LICENSE_DESCRIPTIONS[license_id]

    upper = license_id.upper()
    for fragment, key in _DESCRIPTION_FRAGMENTS:
        if fragment in upper:
            return LICENSE_DESCRIPTIONS[key]

    category = categorize_license(license_id).value
    return f"No detailed summary available for {license_id}. It is categorized as {category}."
