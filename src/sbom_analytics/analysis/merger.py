"""
Merging several CycloneDX JSON documents describing the same software.

The first document is the base. Later documents contribute components whose
purl is new and findings re-pointed at the base component with the same purl.
Every merged component and finding lists the sources that reported it under
``_rawSources``, each with a copy of that source's original entry.
"""

import copy
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from ..shared.collections import as_list, component_ref, ref_value
from ..shared.exceptions import InvalidDocumentError, create_error_context

logger = logging.getLogger(__name__)

# Provenance key added to merged components and findings
RAW_SOURCES_KEY = "_rawSources"


def _raw_source(name: str, raw: dict[str, Any]) -> dict[str, Any]:
    snapshot = {key: value for key, value in raw.items() if key != RAW_SOURCES_KEY}
    return {"name": name, "json": copy.deepcopy(snapshot)}


@dataclass
class SourceSummary:
    name: str
    components_found: int = 0
    vulnerabilities_found: int = 0


@dataclass
class OverlapCounts:
    unique: int = 0
    shared: int = 0
    total: int = 0


@dataclass
class MultiSbomStats:
    """Per-source counts and overlap between the merged documents."""

    sources: list[SourceSummary] = field(default_factory=list)
    component_overlap: OverlapCounts = field(default_factory=OverlapCounts)
    vulnerability_overlap: OverlapCounts = field(default_factory=OverlapCounts)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MergeResult:
    document: dict[str, Any]
    stats: MultiSbomStats


class SbomMerger:
    """Merges CycloneDX JSON documents into the first one."""

    def __init__(self, source_names: list[str] | None = None):
        self.source_names = source_names or []
        self.logger = logging.getLogger(__name__)

    def _source_name(self, index: int) -> str:
        if index < len(self.source_names) and self.source_names[index]:
            return self.source_names[index]
        return f"Source {index + 1}"

    def merge(self, documents: list[dict[str, Any]]) -> MergeResult | None:
        """Merge documents; the inputs are not modified.

        Args:
            documents: Parsed CycloneDX JSON documents, base first

        Returns:
            MergeResult, or ``None`` when no documents were given

        Raises:
            InvalidDocumentError: If an entry is not a JSON object
        """
        if not documents:
            return None
        for index, document in enumerate(documents):
            if not isinstance(document, dict):
                raise InvalidDocumentError(
                    "SBOM document must be a JSON object",
                    create_error_context(source=self._source_name(index)),
                )

        base = copy.deepcopy(documents[0])
        base["components"] = as_list(base.get("components"))
        base["vulnerabilities"] = as_list(base.get("vulnerabilities"))
        stats = MultiSbomStats()
        stats.sources.append(
            SourceSummary(
                name=self._source_name(0),
                components_found=len(base["components"]),
                vulnerabilities_found=len(base["vulnerabilities"]),
            )
        )

        base_name = self._source_name(0)
        purl_to_ref: dict[str, str] = {}
        by_ref: dict[str, dict[str, Any]] = {}
        for component in base["components"]:
            if not isinstance(component, dict):
                continue
            if component.get("purl"):
                ref = component_ref(component) or component["purl"]
                component["bom-ref"] = ref
                purl_to_ref.setdefault(component["purl"], ref)
                by_ref.setdefault(ref, component)
            component[RAW_SOURCES_KEY] = [_raw_source(base_name, component)]

        seen_pairs: set[tuple[str, str]] = set()
        ids_by_source: dict[str, set[int]] = {}
        for finding in base["vulnerabilities"]:
            if not isinstance(finding, dict):
                continue
            finding[RAW_SOURCES_KEY] = [_raw_source(base_name, finding)]
            if not finding.get("id"):
                continue
            ids_by_source.setdefault(finding["id"], set()).add(0)
            for affect in as_list(finding.get("affects")):
                ref = ref_value(affect.get("ref")) if isinstance(affect, dict) else None
                if ref:
                    seen_pairs.add((finding["id"], ref))

        shared_purls: set[str] = set()
        for index, document in enumerate(documents[1:], start=1):
            source_name = self._source_name(index)
            summary = SourceSummary(name=source_name)
            ref_to_purl: dict[str, str] = {}

            for raw in as_list(document.get("components")):
                summary.components_found += 1
                if not isinstance(raw, dict) or not raw.get("purl"):
                    continue
                purl = raw["purl"]
                ref_to_purl[component_ref(raw) or purl] = purl
                if purl in purl_to_ref:
                    shared_purls.add(purl)
                    existing = by_ref.get(purl_to_ref[purl])
                    if existing is not None:
                        sources = existing.setdefault(RAW_SOURCES_KEY, [])
                        sources.append(_raw_source(source_name, raw))
                    continue
                component = copy.deepcopy(raw)
                component["bom-ref"] = component_ref(raw) or purl
                component[RAW_SOURCES_KEY] = [_raw_source(source_name, component)]
                base["components"].append(component)
                purl_to_ref[purl] = component["bom-ref"]
                by_ref[component["bom-ref"]] = component

            for raw in as_list(document.get("vulnerabilities")):
                if not isinstance(raw, dict) or not raw.get("id"):
                    continue
                summary.vulnerabilities_found += 1
                finding_id = raw["id"]
                ids_by_source.setdefault(finding_id, set()).add(index)

                affects = []
                for affect in as_list(raw.get("affects")):
                    if not isinstance(affect, dict):
                        continue
                    purl = ref_to_purl.get(ref_value(affect.get("ref")) or "")
                    target = purl_to_ref.get(purl) if purl else None
                    if not target or (finding_id, target) in seen_pairs:
                        continue
                    seen_pairs.add((finding_id, target))
                    affects.append({**copy.deepcopy(affect), "ref": target})

                if affects:
                    finding = copy.deepcopy(raw)
                    finding["affects"] = affects
                    finding[RAW_SOURCES_KEY] = [_raw_source(source_name, raw)]
                    base["vulnerabilities"].append(finding)

            stats.sources.append(summary)

        shared_ids = {
            finding_id for finding_id, sources in ids_by_source.items() if len(sources) > 1
        }
        stats.component_overlap = OverlapCounts(
            shared=len(shared_purls),
            total=len(base["components"]),
            unique=len(base["components"]) - len(shared_purls),
        )
        stats.vulnerability_overlap = OverlapCounts(
            shared=len(shared_ids),
            total=len(base["vulnerabilities"]),
            unique=len(base["vulnerabilities"]) - len(shared_ids),
        )

        self.logger.info(
            f"Merged {len(documents)} SBOMs: {stats.component_overlap.total} components "
            f"({stats.component_overlap.shared} shared), "
            f"{stats.vulnerability_overlap.total} vulnerabilities"
        )
        return MergeResult(document=base, stats=stats)


def merge_sboms(
    documents: list[dict[str, Any]], source_names: list[str] | None = None
) -> MergeResult | None:
    """Merge CycloneDX JSON documents; see :class:`SbomMerger`."""
    return SbomMerger(source_names).merge(documents)
