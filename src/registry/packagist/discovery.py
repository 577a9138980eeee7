"""Packagist discovery helpers: Composer v2 metadata expansion and repository candidates."""

import logging
from typing import Any, Dict, List

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import parse_iso8601
from registry.models import MetadataCandidate
from versioning.models import VersionCandidate
from versioning.ordering import is_packagist_prerelease, strip_v

logger = logging.getLogger(__name__)

UNSET = "__unset"


def _expand_minified(versions: List[Any]) -> List[Dict[str, Any]]:
    """Expand ``composer/2.0`` minified version lists.

    Each entry only carries the keys that changed from the previous entry;
    ``"__unset"`` removes a key.
    """
    expanded: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}
    for entry in versions:
        if not isinstance(entry, dict):
            continue
        current = dict(current)
        for key, value in entry.items():
            if value == UNSET:
                current.pop(key, None)
            else:
                current[key] = value
        expanded.append(current)
    return expanded


def _package_versions(document: Any, name: str) -> List[Dict[str, Any]]:
    """Version entries for ``name`` from a p2 document, expanded when minified."""
    if not isinstance(document, dict):
        return []
    packages = document.get("packages") or {}
    entries = packages.get(name)
    if entries is None:
        lowered = name.lower()
        entries = next((v for k, v in packages.items() if k.lower() == lowered), None)
    if isinstance(entries, dict):
        # composer/1.0 style: keyed by version
        return [e for e in entries.values() if isinstance(e, dict)]
    if not isinstance(entries, list):
        return []
    if document.get("minified"):
        return _expand_minified(entries)
    return [e for e in entries if isinstance(e, dict)]


def _aliases(entry: Dict[str, Any]) -> tuple:
    version = str(entry.get("version") or "")
    aliases = []
    normalized = entry.get("version_normalized")
    if isinstance(normalized, str) and normalized:
        aliases.append(normalized)
    stripped = strip_v(version)
    aliases.append(stripped if stripped != version else f"v{version}")
    return tuple(a for a in aliases if a and a != version)


def _version_candidates(entries: List[Dict[str, Any]]) -> List[VersionCandidate]:
    result = []
    for entry in entries:
        version = entry.get("version")
        if not isinstance(version, str) or not version:
            continue
        result.append(VersionCandidate(
            version=version,
            is_prerelease=is_packagist_prerelease(version),
            published_at=parse_iso8601(entry.get("time")),
            aliases=_aliases(entry),
        ))
    return result


def _source_urls(entry: Dict[str, Any]):
    source = entry.get("source")
    if isinstance(source, dict) and isinstance(source.get("url"), str):
        stype = source.get("type")
        if not stype or str(stype).lower() == "git":
            yield "source", source["url"].strip()
    support = entry.get("support")
    if isinstance(support, dict) and isinstance(support.get("source"), str):
        yield "support.source", support["source"].strip()
    if isinstance(entry.get("homepage"), str):
        yield "homepage", entry["homepage"].strip()


def _extract_repo_candidates(entry: Dict[str, Any], siblings: List[Dict[str, Any]]) -> List[MetadataCandidate]:
    """The version's own source/support/homepage fields, then those of ``siblings`` in order."""
    candidates = [
        MetadataCandidate(source=source, raw_url=url)
        for source, url in _source_urls(entry) if url
    ]
    for sibling in siblings:
        candidates.extend(
            MetadataCandidate(source=source, raw_url=url, from_sibling=True)
            for source, url in _source_urls(sibling) if url
        )
    if is_debug_enabled(logger):
        logger.debug("Extracted repository candidates", extra=extra_context(
            event="function_exit", component="discovery", action="extract_repo_candidates",
            count=len(candidates), package_manager="packagist"
        ))
    return candidates
