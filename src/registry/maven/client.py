"""Maven Central registry client.

Versions come from the Central search API; repository information comes
from the artifact's POM, following ``<parent>`` links when the artifact
itself declares no ``<scm>`` block.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from constants import Constants, Registry
from common.errors import NoRepositoryMetadataError, NotFoundError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from registry.models import MetadataCandidate, ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, is_sentinel_tag, v_tag
from versioning.models import MavenCoordinates, PackageSpec, VersionCandidate
from versioning.ordering import by_version, compare_versions, is_maven_prerelease
from versioning.parser import parse_for_registry, parse_maven_spec
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import (
    _artifact_pom_url,
    _has_scm,
    _parse_pom,
    _project_url_candidate,
    _scm_candidates,
    _search_docs,
    _version_candidates,
)

logger = logging.getLogger(__name__)


class MavenClient:
    """Registry client for Maven Central (search API plus repo1 POMs)."""

    registry = Registry.MAVEN

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        search_url: Optional[str] = None,
        repo_url: Optional[str] = None,
    ):
        self.http = http or HttpClient()
        self.search_url = search_url or Constants.REGISTRY_URL_MAVEN
        self.repo_url = repo_url or Constants.REGISTRY_URL_MAVEN_REPO
        self.resolver = VersionResolver(VersionPolicy(Registry.MAVEN, by_version(compare_versions)))

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.MAVEN, spec)

    def _search(self, query: str, rows: int, core: Optional[str] = None) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"q": query, "rows": rows, "wt": "json"}
        if core:
            params["core"] = core
        return _search_docs(self.http.get_json(self.search_url, context="maven", params=params))

    def find_artifact(self, coords: MavenCoordinates) -> Dict[str, Any]:
        """Search document for the artifact; raises NotFoundError when absent."""
        docs = self._search(f'g:"{coords.group_id}" AND a:"{coords.artifact_id}"', rows=1)
        if not docs:
            raise NotFoundError(
                f'Artifact "{coords.name}" not found on Maven Central.',
                registry="maven",
                package=coords.name,
            )
        return docs[0]

    def list_versions(self, coords: MavenCoordinates, rows: Optional[int] = None) -> List[VersionCandidate]:
        docs = self._search(
            f'g:"{coords.group_id}" AND a:"{coords.artifact_id}"',
            rows=rows or Constants.MAVEN_VERSION_ROWS,
            core="gav",
        )
        return _version_candidates(docs)

    def version_exists(self, coords: MavenCoordinates, version: str) -> bool:
        docs = self._search(
            f'g:"{coords.group_id}" AND a:"{coords.artifact_id}" AND v:"{version}"',
            rows=1,
            core="gav",
        )
        return bool(docs)

    def fetch_pom(self, group: str, artifact: str, version: str) -> Optional[Dict[str, Any]]:
        """Parsed POM, or None when repo1 has no POM at those coordinates."""
        pom_xml = self.http.get_text(_artifact_pom_url(self.repo_url, group, artifact, version), context="maven")
        if pom_xml is None:
            if is_debug_enabled(logger):
                logger.debug("POM fetch failed", extra=extra_context(
                    event="function_exit", component="client", action="fetch_pom",
                    outcome="not_found", package_manager="maven"
                ))
            return None
        return _parse_pom(pom_xml)

    def _inherited_scm(self, pom: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Walk ``<parent>`` links until a POM with an ``<scm>`` block is found."""
        parent = pom.get("parent")
        depth = 0
        while parent and depth < Constants.MAVEN_PARENT_MAX_DEPTH:
            depth += 1
            parent_pom = self.fetch_pom(parent["groupId"], parent["artifactId"], parent["version"])
            if parent_pom is None:
                return None
            if _has_scm(parent_pom):
                if is_debug_enabled(logger):
                    logger.debug("Found SCM in parent POM", extra=extra_context(
                        event="decision", component="client", action="traverse_for_scm",
                        depth=depth, package_manager="maven"
                    ))
                return parent_pom
            parent = parent_pom.get("parent")
        return None

    def _pom_candidates(self, coords: MavenCoordinates, version: str, from_sibling: bool = False):
        """Return (candidates, own POM) for one version."""
        pom = self.fetch_pom(coords.group_id, coords.artifact_id, version)
        if pom is None:
            return [], None
        candidates: List[MetadataCandidate] = _scm_candidates(pom, from_sibling=from_sibling)
        if not candidates:
            inherited = self._inherited_scm(pom)
            if inherited is not None:
                candidates.extend(_scm_candidates(inherited, prefix="parent.scm", from_sibling=from_sibling))
        candidates.extend(_project_url_candidate(pom, from_sibling=from_sibling))
        return candidates, pom

    def _choose_version(self, coords: MavenCoordinates, artifact_doc: Dict[str, Any], allow_prerelease: bool):
        """Return (chosen candidate, known candidates)."""
        if coords.version:
            if self.version_exists(coords, coords.version):
                chosen = VersionCandidate(coords.version, is_prerelease=is_maven_prerelease(coords.version))
                return chosen, []
            recent = self.list_versions(coords, rows=Constants.RECENT_VERSIONS_LIMIT)
            raise NotFoundError(
                f'Version "{coords.version}" of {coords.name} was not found on Maven Central.',
                registry="maven",
                package=coords.name,
                version=coords.version,
                recent_versions=self.resolver.recent_versions(recent),
            )

        latest = artifact_doc.get("latestVersion")
        candidates = self.list_versions(coords)
        if not candidates and isinstance(latest, str) and latest:
            candidates = [VersionCandidate(latest, is_prerelease=is_maven_prerelease(latest))]
        chosen = self.resolver.resolve(
            coords.name,
            candidates,
            allow_prerelease=allow_prerelease,
            latest_hint=latest if isinstance(latest, str) else None,
        )
        return chosen, candidates

    def _previous_version(self, candidates: List[VersionCandidate], version: str) -> Optional[str]:
        ordered = [c.version for c in self.resolver.sorted_desc([c for c in candidates if not c.yanked])]
        if version in ordered:
            idx = ordered.index(version)
            return ordered[idx + 1] if idx + 1 < len(ordered) else None
        return ordered[0] if ordered else None

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        coords = parse_maven_spec(spec.name if not spec.version else f"{spec.name}:{spec.version}")
        artifact_doc = self.find_artifact(coords)
        chosen, known = self._choose_version(coords, artifact_doc, allow_prerelease)
        version = chosen.version

        own, pom = self._pom_candidates(coords, version)
        try:
            candidate, ref = select_candidate(own, registry="maven", package=coords.name, version=version)
        except NoRepositoryMetadataError:
            if not known:
                known = self.list_versions(coords)
            previous = self._previous_version(known, version)
            sibling: List[MetadataCandidate] = []
            if previous:
                sibling, _ = self._pom_candidates(coords, previous, from_sibling=True)
            candidate, ref = select_candidate(
                own + sibling,
                registry="maven",
                package=coords.name,
                version=version,
                recent_versions=self.resolver.recent_versions(known),
            )

        scm_tag = ((pom or {}).get("scm") or {}).get("tag")
        refs = build_ref_candidates(
            version,
            explicit_tag=None if is_sentinel_tag(scm_tag) else scm_tag,
            conventions=[f"{coords.artifact_id}-{version}", v_tag(version)],
        )

        if is_debug_enabled(logger):
            logger.debug("Resolved Maven artifact", extra=extra_context(
                event="resolved", component="client", package_manager="maven",
                package=coords.name, version=version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.MAVEN,
            name=coords.name,
            version=version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            metadata_source=candidate.source,
        )
