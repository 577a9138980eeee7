"""NPM registry client: resolve a package version to its source repository."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants, Registry
from common.errors import NotFoundError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from common.timestamps import parse_iso8601
from registry.models import ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, v_tag
from versioning.models import PackageSpec, VersionCandidate
from versioning.ordering import by_version, compare_semver, is_semver_prerelease
from versioning.parser import parse_for_registry
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import _extract_repo_candidates

logger = logging.getLogger(__name__)

PACKUMENT_HEADERS = {"Accept": "application/json"}


def _package_url(base: str, name: str) -> str:
    """Scoped names keep ``@`` and encode the slash: ``@scope%2Fname``."""
    return base + quote(name, safe="@")


def _version_candidates(packument: Dict[str, Any]) -> List[VersionCandidate]:
    versions = packument.get("versions") or {}
    times = packument.get("time") or {}
    return [
        VersionCandidate(
            version=version,
            is_prerelease=is_semver_prerelease(version),
            published_at=parse_iso8601(times.get(version)),
        )
        for version in versions
    ]


class NpmClient:
    """Registry client for npmjs.org packuments."""

    registry = Registry.NPM

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = base_url or Constants.REGISTRY_URL_NPM
        self.resolver = VersionResolver(VersionPolicy(Registry.NPM, by_version(compare_semver)))

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.NPM, spec)

    def fetch_packument(self, name: str) -> Dict[str, Any]:
        """Fetch the full packument; raises NotFoundError on 404."""
        packument = self.http.get_json(
            _package_url(self.base_url, name), context="npm", headers=PACKUMENT_HEADERS
        )
        if not isinstance(packument, dict):
            raise NotFoundError(
                f'Package "{name}" not found on npm.', registry="npm", package=name
            )
        return packument

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        """Resolve ``spec`` to a version and repository."""
        packument = self.fetch_packument(spec.name)
        candidates = _version_candidates(packument)
        latest = (packument.get("dist-tags") or {}).get("latest")

        chosen = self.resolver.resolve(
            spec.name,
            candidates,
            requested=spec.version,
            allow_prerelease=allow_prerelease,
            latest_hint=latest,
        )
        version_info = (packument.get("versions") or {}).get(chosen.version) or {}

        candidate, ref = select_candidate(
            _extract_repo_candidates(version_info, packument),
            registry="npm",
            package=spec.name,
            version=chosen.version,
            recent_versions=self.resolver.recent_versions(candidates),
        )

        conventions = [v_tag(chosen.version)]
        if candidate.directory:
            # monorepo release tooling tags per package
            conventions.append(f"{spec.name}@{chosen.version}")
        refs = build_ref_candidates(chosen.version, conventions=conventions)

        if is_debug_enabled(logger):
            logger.debug("Resolved npm package", extra=extra_context(
                event="resolved", component="client", package_manager="npm",
                package=spec.name, version=chosen.version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.NPM,
            name=spec.name,
            version=chosen.version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            repo_directory=candidate.directory,
            metadata_source=candidate.source,
        )
