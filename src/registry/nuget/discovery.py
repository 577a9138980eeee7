"""NuGet discovery helpers: service index lookup, registration leaves and nuspec metadata."""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import parse_iso8601
from registry.models import MetadataCandidate
from versioning.models import VersionCandidate
from versioning.ordering import is_nuget_prerelease

logger = logging.getLogger(__name__)

# Preferred first: the 3.6.0 hive includes SemVer 2.0.0 packages
REGISTRATION_TYPES = ["RegistrationsBaseUrl/3.6.0", "RegistrationsBaseUrl"]
PACKAGE_BASE_TYPES = ["PackageBaseAddress/3.0.0", "PackageBaseAddress"]


def _find_resource(service_index: Dict[str, Any], type_prefixes: List[str]) -> Optional[str]:
    """Return the ``@id`` of the first resource whose ``@type`` starts with a prefix.

    Prefixes are tried in order and compared case-insensitively.
    """
    resources = [r for r in service_index.get("resources") or [] if isinstance(r, dict)]
    for prefix in type_prefixes:
        wanted = prefix.lower()
        for resource in resources:
            rtype = resource.get("@type")
            rtypes = rtype if isinstance(rtype, list) else [rtype]
            if any(isinstance(t, str) and t.lower().startswith(wanted) for t in rtypes):
                base = resource.get("@id")
                if isinstance(base, str) and base:
                    return base if base.endswith("/") else base + "/"
    return None


def _catalog_entry(leaf: Dict[str, Any]) -> Dict[str, Any]:
    entry = leaf.get("catalogEntry") if isinstance(leaf, dict) else None
    return entry if isinstance(entry, dict) else {}


def _leaf_version(leaf: Dict[str, Any]) -> Optional[str]:
    version = _catalog_entry(leaf).get("version")
    return version if isinstance(version, str) and version else None


def _version_candidates(leaves: List[Dict[str, Any]]) -> List[VersionCandidate]:
    result = []
    for leaf in leaves:
        entry = _catalog_entry(leaf)
        version = _leaf_version(leaf)
        if not version:
            continue
        result.append(VersionCandidate(
            version=version,
            is_prerelease=is_nuget_prerelease(version),
            published_at=parse_iso8601(entry.get("published")),
            # unlisted packages remain restorable by exact version only
            yanked=entry.get("listed") is False,
        ))
    return result


def _repository_url(repository: Any) -> Optional[str]:
    """URL of a ``repository`` object whose type is git or unspecified."""
    if isinstance(repository, str):
        return repository.strip() or None
    if not isinstance(repository, dict):
        return None
    rtype = repository.get("type")
    if isinstance(rtype, str) and rtype.strip() and rtype.strip().lower() != "git":
        return None
    url = repository.get("url")
    return url.strip() if isinstance(url, str) and url.strip() else None


def _leaf_repository(leaf: Dict[str, Any]) -> Optional[str]:
    return _repository_url(_catalog_entry(leaf).get("repository"))


def _leaf_project_url(leaf: Dict[str, Any]) -> Optional[str]:
    url = _catalog_entry(leaf).get("projectUrl")
    return url.strip() if isinstance(url, str) and url.strip() else None


def _local(tag: Any) -> str:
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _parse_nuspec(nuspec_xml: str) -> Dict[str, Optional[str]]:
    """Extract repository and projectUrl from a nuspec document.

    The nuspec namespace differs between schema versions, so elements are
    matched by local name.
    """
    result: Dict[str, Optional[str]] = {"repository": None, "projectUrl": None}
    try:
        root = ET.fromstring(nuspec_xml)
    except ET.ParseError:
        if is_debug_enabled(logger):
            logger.debug("Nuspec parse error", extra=extra_context(
                event="anomaly", component="discovery", action="parse_nuspec",
                outcome="parse_error", package_manager="nuget"
            ))
        return result
    metadata = next((child for child in root if _local(child.tag) == "metadata"), None)
    if metadata is None:
        return result
    for child in metadata:
        name = _local(child.tag)
        if name == "repository":
            result["repository"] = _repository_url(dict(child.attrib))
        elif name == "projectUrl" and isinstance(child.text, str) and child.text.strip():
            result["projectUrl"] = child.text.strip()
    return result


def _extract_repo_candidates(
    leaf: Dict[str, Any],
    nuspec: Optional[Dict[str, Optional[str]]],
    siblings: List[Dict[str, Any]],
) -> List[MetadataCandidate]:
    """Candidates for one version in priority order.

    The version's registration leaf and nuspec come first (repository before
    projectUrl). Other versions' leaves follow newest first, repository
    fields before projectUrl fields.
    """
    nuspec = nuspec or {}
    candidates: List[MetadataCandidate] = []
    for source, url in (
        ("repository", _leaf_repository(leaf)),
        ("nuspec.repository", nuspec.get("repository")),
        ("projectUrl", _leaf_project_url(leaf)),
        ("nuspec.projectUrl", nuspec.get("projectUrl")),
    ):
        if url:
            candidates.append(MetadataCandidate(source=source, raw_url=url))

    for sibling in reversed(siblings):
        url = _leaf_repository(sibling)
        if url:
            candidates.append(MetadataCandidate(source="repository", raw_url=url, from_sibling=True))
    for sibling in reversed(siblings):
        url = _leaf_project_url(sibling)
        if url:
            candidates.append(MetadataCandidate(source="projectUrl", raw_url=url, from_sibling=True))

    if is_debug_enabled(logger):
        logger.debug("Extracted repository candidates", extra=extra_context(
            event="function_exit", component="discovery", action="extract_repo_candidates",
            count=len(candidates), package_manager="nuget"
        ))
    return candidates
