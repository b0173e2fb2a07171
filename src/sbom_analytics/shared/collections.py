"""
Canonicalization of the loosely-typed collections found in real SBOMs.

SBOM producers disagree on how collections are encoded: JSON arrays, sets,
mapping values, single objects or plain nulls. Every reader in this module
degrades a malformed shape to an empty result instead of raising.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import InvalidDocumentError, create_error_context
from .models import (
    SEVERITY_ORDER,
    Affect,
    Component,
    DependencyRecord,
    Finding,
    License,
    Rating,
    SbomDocument,
    SeverityLevel,
)

logger = logging.getLogger(__name__)

_REF_KEYS = ("bom-ref", "bomRef", "bom_ref", "ref")
_SEVERITY_VALUES = {level.value for level in SEVERITY_ORDER}


def as_list(value: Any) -> list[Any]:
    """Return any collection-like value as a plain ordered list.

    Args:
        value: Array, tuple, set, mapping, iterator or ``None``

    Returns:
        A new list; empty for ``None``, strings and non-iterables
    """
    if value is None:
        return []
    if isinstance(value, list | tuple | set | frozenset):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.values())
    if isinstance(value, str | bytes | bytearray):
        return []
    if isinstance(value, Iterable):
        try:
            return list(value)
        except TypeError:
            return []
    return []


def get_field(obj: Any, *names: str, default: Any = None) -> Any:
    """Read the first non-null field from a mapping or attribute object."""
    if obj is None:
        return default
    for name in names:
        if isinstance(obj, Mapping):
            value = obj.get(name)
        else:
            value = getattr(obj, name.replace("-", "_"), None)
        if value is not None:
            return value
    return default


def ref_value(value: Any) -> str | None:
    """Read a reference given as ``"x"``, ``{"value": "x"}`` or ``{"ref": "x"}``."""
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    inner = get_field(value, "value", "ref")
    if isinstance(inner, str):
        return inner or None
    if inner is not None and not isinstance(inner, Mapping | Iterable):
        return str(inner)
    return None


def read_refs(value: Any) -> list[str]:
    """Read a collection of references, dropping unreadable entries.

    Duplicates collapse; first-seen order is kept.
    """
    refs: dict[str, None] = {}
    for item in as_list(value):
        ref = ref_value(item)
        if ref:
            refs[ref] = None
    return list(refs)


def component_ref(obj: Any) -> str | None:
    """Return the bom-ref of a component-shaped object."""
    for key in _REF_KEYS:
        ref = ref_value(get_field(obj, key))
        if ref:
            return ref
    return None


def normalize_severity(value: Any) -> SeverityLevel:
    """Map a raw rating severity onto the fixed severity levels.

    Unknown, missing and informational values resolve to ``none``.
    """
    raw = getattr(value, "value", value)
    if not isinstance(raw, str):
        return SeverityLevel.NONE
    lowered = raw.strip().lower()
    if lowered in _SEVERITY_VALUES:
        return SeverityLevel(lowered)
    return SeverityLevel.NONE


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(getattr(value, "value", value))
    return text or None


def parse_license(entry: Any) -> License | None:
    """Parse one license entry in any of the shapes SBOM tools emit."""
    if entry is None:
        return None
    if isinstance(entry, License):
        return entry
    if isinstance(entry, str):
        return License(id=entry) if entry else None

    expression = get_field(entry, "expression")
    if expression is not None:
        return License(expression=_optional_str(expression))

    inner = get_field(entry, "license")
    source = inner if inner is not None else entry
    license_id = get_field(source, "id")
    name = get_field(source, "name")
    url = get_field(source, "url")

    if isinstance(entry, Mapping) or any(v is not None for v in (license_id, name)):
        return License(
            id=_optional_str(license_id), name=_optional_str(name), url=_optional_str(url)
        )
    return None


def parse_licenses(value: Any) -> list[License]:
    """Parse a component's license collection."""
    licenses = []
    for entry in as_list(value):
        parsed = parse_license(entry)
        if parsed is not None:
            licenses.append(parsed)
    return licenses


def parse_component(obj: Any) -> Component | None:
    """Build a canonical component from a mapping or component-like object.

    Args:
        obj: Raw component entry

    Returns:
        Component record, or ``None`` when the entry is not an object
    """
    if isinstance(obj, Component):
        return obj
    if obj is None or isinstance(obj, str | bytes | int | float | bool | list | tuple):
        return None

    name = get_field(obj, "name", default="")
    return Component(
        ref=component_ref(obj),
        name=name if isinstance(name, str) else str(name),
        version=_optional_str(get_field(obj, "version")),
        group=_optional_str(get_field(obj, "group")),
        purl=_optional_str(get_field(obj, "purl")),
        type=_optional_str(get_field(obj, "type")) or "library",
        description=_optional_str(get_field(obj, "description")),
        licenses=parse_licenses(get_field(obj, "licenses")),
        hashes=as_list(get_field(obj, "hashes")),
        properties=as_list(get_field(obj, "properties")),
        supplier=get_field(obj, "supplier"),
        dependencies=read_refs(get_field(obj, "dependencies")),
    )


def parse_dependency(obj: Any) -> DependencyRecord | None:
    """Parse one top-level ``{ref, dependsOn[]}`` record."""
    if isinstance(obj, DependencyRecord):
        return obj
    ref = ref_value(get_field(obj, "ref")) if obj is not None else None
    if not ref:
        return None
    return DependencyRecord(
        ref=ref, depends_on=read_refs(get_field(obj, "dependsOn", "depends_on"))
    )


def _parse_rating(obj: Any) -> Rating | None:
    if isinstance(obj, Rating):
        return obj
    if obj is None or isinstance(obj, str | int | float):
        return None
    score = get_field(obj, "score")
    try:
        score = float(score) if score is not None else None
    except (TypeError, ValueError):
        score = None
    return Rating(
        severity=_optional_str(get_field(obj, "severity")),
        score=score,
        method=_optional_str(get_field(obj, "method")),
        vector=_optional_str(get_field(obj, "vector")),
    )


def _parse_affect(obj: Any) -> Affect | None:
    if isinstance(obj, Affect):
        return obj
    ref = ref_value(obj) if isinstance(obj, str) else ref_value(get_field(obj, "ref"))
    if not ref:
        return None
    return Affect(ref=ref, versions=as_list(get_field(obj, "versions")))


def _parse_cwes(value: Any) -> list[int]:
    cwes = []
    for item in as_list(value):
        try:
            cwes.append(int(item))
        except (TypeError, ValueError):
            continue
    return cwes


def _as_dict(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, Mapping) else None


def parse_finding(obj: Any) -> Finding | None:
    """Build a canonical finding from a raw vulnerability entry."""
    if isinstance(obj, Finding):
        return obj
    if obj is None or isinstance(obj, str | bytes | int | float | bool | list | tuple):
        return None

    ratings = [r for r in map(_parse_rating, as_list(get_field(obj, "ratings"))) if r]
    affects = [a for a in map(_parse_affect, as_list(get_field(obj, "affects"))) if a]
    return Finding(
        id=_optional_str(get_field(obj, "id")),
        ratings=ratings,
        affects=affects,
        description=_optional_str(get_field(obj, "description")),
        detail=_optional_str(get_field(obj, "detail")),
        recommendation=_optional_str(get_field(obj, "recommendation")),
        advisories=[
            dict(a) for a in as_list(get_field(obj, "advisories")) if isinstance(a, Mapping)
        ],
        cwes=_parse_cwes(get_field(obj, "cwes")),
        source=_as_dict(get_field(obj, "source")),
        references=[
            dict(r) for r in as_list(get_field(obj, "references")) if isinstance(r, Mapping)
        ],
        analysis=_as_dict(get_field(obj, "analysis")),
        created=_optional_str(get_field(obj, "created")),
        published=_optional_str(get_field(obj, "published")),
        updated=_optional_str(get_field(obj, "updated")),
        rejected=_optional_str(get_field(obj, "rejected")),
        proof_of_concept=_as_dict(get_field(obj, "proofOfConcept", "proof_of_concept")),
    )


def _read_tools(value: Any) -> list[Any]:
    """Tools are either a list or a CycloneDX 1.5 ``{components, services}`` object."""
    if isinstance(value, Mapping):
        tools: list[Any] = []
        for group in value.values():
            tools.extend(as_list(group))
        return tools
    return as_list(value)


def _parse_all(values: Any, parser) -> list[Any]:
    parsed = []
    skipped = 0
    for item in as_list(values):
        record = parser(item)
        if record is None:
            skipped += 1
            continue
        parsed.append(record)
    if skipped:
        kind = parser.__name__.removeprefix("parse_")
        logger.debug(f"Skipped {skipped} malformed {kind} entries")
    return parsed


def canonicalize_document(document: Any) -> SbomDocument:
    """Canonicalize a raw SBOM document into typed records.

    Args:
        document: Parsed CycloneDX JSON mapping or an object with the same
            attributes

    Returns:
        SbomDocument with plain lists of typed records

    Raises:
        InvalidDocumentError: If the input is not an object at all
    """
    if isinstance(document, SbomDocument):
        return document
    if document is None or isinstance(
        document, str | bytes | bytearray | int | float | bool | list | tuple | set
    ):
        raise InvalidDocumentError(
            "SBOM document must be an object",
            create_error_context(received_type=type(document).__name__),
        )

    metadata = get_field(document, "metadata")
    metadata_component = parse_component(get_field(metadata, "component"))

    return SbomDocument(
        components=_parse_all(get_field(document, "components"), parse_component),
        dependencies=_parse_all(get_field(document, "dependencies"), parse_dependency),
        vulnerabilities=_parse_all(get_field(document, "vulnerabilities"), parse_finding),
        metadata_component=metadata_component,
        tools=_read_tools(get_field(metadata, "tools")),
        authors=as_list(get_field(metadata, "authors")),
    )
