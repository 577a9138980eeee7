"""crates.io registry client."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from constants import Constants, Registry
from common.errors import NotFoundError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from registry.models import ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, v_tag
from versioning.models import PackageSpec
from versioning.ordering import by_version, compare_semver
from versioning.parser import parse_for_registry
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import _extract_repo_candidates, _version_candidates

logger = logging.getLogger(__name__)


class CratesClient:
    """Registry client for the crates.io v1 API.

    crates.io rejects requests without a User-Agent; ``HttpClient`` always
    sends one.
    """

    registry = Registry.CRATES

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = base_url or Constants.REGISTRY_URL_CRATES
        self.resolver = VersionResolver(VersionPolicy(Registry.CRATES, by_version(compare_semver)))

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.CRATES, spec)

    def fetch_crate(self, name: str) -> Dict[str, Any]:
        document = self.http.get_json(f"{self.base_url}{quote(name, safe='')}", context="crates")
        if not isinstance(document, dict) or not isinstance(document.get("crate"), dict):
            raise NotFoundError(
                f'Crate "{name}" not found on crates.io.', registry="crates", package=name
            )
        return document

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        document = self.fetch_crate(spec.name)
        crate = document["crate"]
        candidates = _version_candidates(document)

        chosen = self.resolver.resolve(
            spec.name,
            candidates,
            requested=spec.version,
            allow_prerelease=allow_prerelease,
            latest_hint=crate.get("max_stable_version") or crate.get("max_version"),
        )
        candidate, ref = select_candidate(
            _extract_repo_candidates(crate),
            registry="crates",
            package=spec.name,
            version=chosen.version,
            recent_versions=self.resolver.recent_versions(candidates),
        )
        refs = build_ref_candidates(chosen.version, conventions=[v_tag(chosen.version)])

        if is_debug_enabled(logger):
            logger.debug("Resolved crate", extra=extra_context(
                event="resolved", component="client", package_manager="crates",
                package=spec.name, version=chosen.version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.CRATES,
            name=spec.name,
            version=chosen.version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            metadata_source=candidate.source,
        )
