"""Maven discovery helpers: POM parsing and Central search document handling."""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import from_epoch_ms
from registry.models import MetadataCandidate
from versioning.models import VersionCandidate
from versioning.ordering import is_maven_prerelease

logger = logging.getLogger(__name__)

# <connection> and <developerConnection> name the checkout location; <url> is often a web view
SCM_FIELDS = ["connection", "developerConnection", "url"]


def _local(tag: Any) -> str:
    """Element tag without its ``{namespace}`` prefix."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _child(elem: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    """First direct child named ``name``, whatever namespace the POM declares."""
    if elem is None:
        return None
    for item in elem:
        if _local(item.tag) == name:
            return item
    return None


def _text(elem: Optional[ET.Element], name: str) -> Optional[str]:
    node = _child(elem, name)
    if node is None or not isinstance(node.text, str):
        return None
    value = node.text.strip()
    return value or None


def _artifact_pom_url(base_url: str, group: str, artifact: str, version: str) -> str:
    """Construct the Maven Central POM URL for given coordinates."""
    group_path = group.replace(".", "/")
    return f"{base_url}{group_path}/{artifact}/{version}/{artifact}-{version}.pom"


def _parse_pom(pom_xml: str) -> Dict[str, Any]:
    """Extract ``scm``, project ``url`` and ``parent`` from POM XML.

    Unparsable documents yield empty fields; callers treat that the same
    as a POM without repository information.
    """
    result: Dict[str, Any] = {"scm": {}, "url": None, "parent": None}
    try:
        root = ET.fromstring(pom_xml)
    except ET.ParseError:
        if is_debug_enabled(logger):
            logger.debug("POM parse error", extra=extra_context(
                event="anomaly", component="discovery", action="parse_pom",
                outcome="parse_error", package_manager="maven"
            ))
        return result

    scm_elem = _child(root, "scm")
    if scm_elem is not None:
        result["scm"] = {
            field: _text(scm_elem, field) for field in SCM_FIELDS + ["tag"]
        }
    result["url"] = _text(root, "url")

    parent_elem = _child(root, "parent")
    if parent_elem is not None:
        parent = {field: _text(parent_elem, field) for field in ("groupId", "artifactId", "version")}
        if all(parent.values()):
            result["parent"] = parent
    return result


def _has_scm(pom: Dict[str, Any]) -> bool:
    scm = pom.get("scm") or {}
    return any(scm.get(field) for field in SCM_FIELDS)


def _scm_candidates(pom: Dict[str, Any], prefix: str = "scm", from_sibling: bool = False) -> List[MetadataCandidate]:
    scm = pom.get("scm") or {}
    return [
        MetadataCandidate(source=f"{prefix}.{field}", raw_url=scm[field], from_sibling=from_sibling)
        for field in SCM_FIELDS
        if scm.get(field)
    ]


def _project_url_candidate(pom: Dict[str, Any], from_sibling: bool = False) -> List[MetadataCandidate]:
    if pom.get("url"):
        return [MetadataCandidate(source="url", raw_url=pom["url"], from_sibling=from_sibling)]
    return []


def _search_docs(document: Any) -> List[Dict[str, Any]]:
    if not isinstance(document, dict):
        return []
    docs = (document.get("response") or {}).get("docs") or []
    return [d for d in docs if isinstance(d, dict)]


def _version_candidates(docs: List[Dict[str, Any]]) -> List[VersionCandidate]:
    """Candidates from ``core=gav`` search documents (``v`` and ``timestamp``)."""
    seen = set()
    result = []
    for doc in docs:
        version = doc.get("v")
        if not isinstance(version, str) or not version or version in seen:
            continue
        seen.add(version)
        result.append(VersionCandidate(
            version=version,
            is_prerelease=is_maven_prerelease(version),
            published_at=from_epoch_ms(doc.get("timestamp")),
        ))
    return result
