"""NPM discovery helpers: repository candidates from packument metadata."""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from registry.models import MetadataCandidate

logger = logging.getLogger(__name__)

# "owner/repo" with no scheme is npm's GitHub shorthand
_BARE_SHORTHAND = re.compile(r"^[A-Za-z0-9][\w.\-]*/[\w.\-]+$")


def _expand_npm_shorthand(url: str) -> str:
    text = url.strip()
    if _BARE_SHORTHAND.match(text):
        return f"github:{text}"
    return text


def _parse_repository_field(info: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """Return (url, directory) from an npm ``repository`` field.

    The field is either a string (URL or shorthand) or an object with
    ``url`` and an optional monorepo ``directory``.
    """
    repo = info.get("repository") if isinstance(info, dict) else None
    if isinstance(repo, str) and repo.strip():
        return _expand_npm_shorthand(repo), None
    if isinstance(repo, dict):
        url = repo.get("url")
        directory = repo.get("directory")
        if isinstance(url, str) and url.strip():
            directory = directory.strip().strip("/") if isinstance(directory, str) and directory.strip() else None
            return _expand_npm_shorthand(url), directory
    return None, None


def _homepage(info: Dict[str, Any]) -> Optional[str]:
    homepage = info.get("homepage") if isinstance(info, dict) else None
    if isinstance(homepage, str) and homepage.strip():
        return homepage.strip()
    return None


def _extract_repo_candidates(version_info: Dict[str, Any], packument: Dict[str, Any]) -> List[MetadataCandidate]:
    """Build candidates in priority order.

    The version document wins; the packument's top-level fields describe the
    package as of its latest publish and are used as the fallback.
    """
    candidates: List[MetadataCandidate] = []

    url, directory = _parse_repository_field(version_info)
    if url:
        candidates.append(MetadataCandidate(source="repository", raw_url=url, directory=directory))
    homepage = _homepage(version_info)
    if homepage:
        candidates.append(MetadataCandidate(source="homepage", raw_url=homepage))

    url, directory = _parse_repository_field(packument)
    if url:
        candidates.append(
            MetadataCandidate(source="repository", raw_url=url, directory=directory, from_sibling=True)
        )
    homepage = _homepage(packument)
    if homepage:
        candidates.append(MetadataCandidate(source="homepage", raw_url=homepage, from_sibling=True))

    if is_debug_enabled(logger):
        logger.debug("Extracted repository candidates", extra=extra_context(
            event="function_exit", component="discovery", action="extract_repo_candidates",
            count=len(candidates), package_manager="npm"
        ))
    return candidates
