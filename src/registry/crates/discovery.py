"""crates.io discovery helpers."""

import logging
from typing import Any, Dict, List

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import parse_iso8601
from registry.models import MetadataCandidate
from versioning.models import VersionCandidate
from versioning.ordering import is_semver_prerelease

logger = logging.getLogger(__name__)


def _extract_repo_candidates(crate: Dict[str, Any]) -> List[MetadataCandidate]:
    """``repository`` first, then ``homepage``; crates.io keeps these per crate."""
    candidates: List[MetadataCandidate] = []
    for field_name in ("repository", "homepage"):
        value = crate.get(field_name)
        if isinstance(value, str) and value.strip():
            candidates.append(MetadataCandidate(source=field_name, raw_url=value.strip()))
    if is_debug_enabled(logger):
        logger.debug("Extracted repository candidates", extra=extra_context(
            event="function_exit", component="discovery", action="extract_repo_candidates",
            count=len(candidates), package_manager="crates"
        ))
    return candidates


def _version_candidates(document: Dict[str, Any]) -> List[VersionCandidate]:
    result = []
    for entry in document.get("versions") or []:
        if not isinstance(entry, dict) or not entry.get("num"):
            continue
        num = str(entry["num"])
        result.append(VersionCandidate(
            version=num,
            is_prerelease=is_semver_prerelease(num),
            published_at=parse_iso8601(entry.get("created_at")),
            yanked=bool(entry.get("yanked")),
        ))
    return result
