"""PyPI discovery helpers: repository candidates and version lists from JSON API documents."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import parse_iso8601
from registry.models import MetadataCandidate
from versioning.models import VersionCandidate
from versioning.ordering import is_pep440_prerelease, normalize_pep440

logger = logging.getLogger(__name__)

# project_urls labels, most specific first
PROJECT_URL_PRIORITY = ["Source", "Source Code", "Repository", "GitHub", "Code", "Homepage"]


def _extract_repo_candidates(info: Dict[str, Any], from_sibling: bool = False) -> List[MetadataCandidate]:
    """Ordered candidates from an ``info`` block.

    Known ``project_urls`` labels first (matched case-insensitively), then
    ``home_page``, then any remaining ``project_urls`` value.
    """
    candidates: List[MetadataCandidate] = []
    project_urls = info.get("project_urls") or {}
    if not isinstance(project_urls, dict):
        project_urls = {}
    lowered = {str(k).strip().lower(): (k, v) for k, v in project_urls.items()}
    used = set()

    for label in PROJECT_URL_PRIORITY:
        entry = lowered.get(label.lower())
        if entry and isinstance(entry[1], str) and entry[1].strip():
            used.add(entry[0])
            candidates.append(MetadataCandidate(
                source=f"project_urls.{entry[0]}", raw_url=entry[1].strip(), from_sibling=from_sibling
            ))

    home_page = info.get("home_page")
    if isinstance(home_page, str) and home_page.strip():
        candidates.append(MetadataCandidate(source="home_page", raw_url=home_page.strip(), from_sibling=from_sibling))

    for key, value in project_urls.items():
        if key not in used and isinstance(value, str) and value.strip():
            candidates.append(MetadataCandidate(
                source=f"project_urls.{key}", raw_url=value.strip(), from_sibling=from_sibling
            ))

    if is_debug_enabled(logger):
        logger.debug("Extracted repository candidates", extra=extra_context(
            event="function_exit", component="discovery", action="extract_repo_candidates",
            count=len(candidates), package_manager="pypi"
        ))
    return candidates


def _release_is_yanked(files: Any) -> bool:
    """A release with no files, or only yanked files, cannot be installed."""
    if not isinstance(files, list) or not files:
        return True
    return all(isinstance(f, dict) and f.get("yanked") for f in files)


def _first_upload(files: Any) -> Optional[str]:
    if not isinstance(files, list):
        return None
    times = [f.get("upload_time_iso_8601") for f in files if isinstance(f, dict) and f.get("upload_time_iso_8601")]
    return min(times) if times else None


def _aliases(version: str) -> Tuple[str, ...]:
    """PEP 440 normalized spelling, when it differs from the published one."""
    normalized = normalize_pep440(version)
    if normalized is None:
        return ()
    return (normalized,) if normalized != version else ()


def _version_candidates(document: Dict[str, Any]) -> List[VersionCandidate]:
    releases = document.get("releases") or {}
    return [
        VersionCandidate(
            version=version,
            is_prerelease=is_pep440_prerelease(version),
            published_at=parse_iso8601(_first_upload(files)),
            yanked=_release_is_yanked(files),
            aliases=_aliases(version),
        )
        for version, files in releases.items()
    ]
