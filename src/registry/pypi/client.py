"""PyPI registry client: resolve a project release to its source repository."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from packaging.utils import canonicalize_name

from constants import Constants, Registry
from common.errors import NotFoundError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from registry.models import ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, v_tag
from versioning.models import PackageSpec
from versioning.ordering import by_version, compare_pep440, normalize_pep440
from versioning.parser import parse_for_registry
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import _extract_repo_candidates, _version_candidates

logger = logging.getLogger(__name__)


class PyPIClient:
    """Registry client for the PyPI JSON API."""

    registry = Registry.PYPI

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = base_url or Constants.REGISTRY_URL_PYPI
        self.resolver = VersionResolver(
            VersionPolicy(Registry.PYPI, by_version(compare_pep440), normalize=normalize_pep440)
        )

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.PYPI, spec)

    def _url(self, name: str, version: Optional[str] = None) -> str:
        project = quote(canonicalize_name(name), safe="")
        if version:
            return f"{self.base_url}{project}/{quote(version, safe='')}/json"
        return f"{self.base_url}{project}/json"

    def fetch_project(self, name: str) -> Dict[str, Any]:
        """Fetch the project document listing every release."""
        document = self.http.get_json(self._url(name), context="pypi")
        if not isinstance(document, dict):
            raise NotFoundError(
                f'Package "{name}" not found on PyPI.', registry="pypi", package=name
            )
        return document

    def fetch_release(self, name: str, version: str) -> Optional[Dict[str, Any]]:
        """Fetch the per-release document; None when PyPI reports 404."""
        document = self.http.get_json(self._url(name, version), context="pypi")
        return document if isinstance(document, dict) else None

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        """Resolve ``spec``; release metadata is preferred over the latest project info."""
        project = self.fetch_project(spec.name)
        latest_info = project.get("info") or {}
        latest_version = latest_info.get("version")
        candidates = _version_candidates(project)

        chosen = self.resolver.resolve(
            spec.name,
            candidates,
            requested=spec.version,
            allow_prerelease=allow_prerelease,
            latest_hint=latest_version,
        )

        if chosen.version == latest_version:
            release_info = latest_info
            sibling_info: Dict[str, Any] = {}
        else:
            release = self.fetch_release(spec.name, chosen.version)
            if release is None:
                raise NotFoundError(
                    f'Release "{chosen.version}" of {spec.name} not found on PyPI.',
                    registry="pypi",
                    package=spec.name,
                    version=chosen.version,
                    recent_versions=self.resolver.recent_versions(candidates),
                )
            release_info = release.get("info") or {}
            sibling_info = latest_info

        metadata = _extract_repo_candidates(release_info) + _extract_repo_candidates(
            sibling_info, from_sibling=True
        )
        candidate, ref = select_candidate(
            metadata,
            registry="pypi",
            package=spec.name,
            version=chosen.version,
            recent_versions=self.resolver.recent_versions(candidates),
        )
        refs = build_ref_candidates(chosen.version, conventions=[v_tag(chosen.version)])

        if is_debug_enabled(logger):
            logger.debug("Resolved PyPI package", extra=extra_context(
                event="resolved", component="client", package_manager="pypi",
                package=spec.name, version=chosen.version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.PYPI,
            name=spec.name,
            version=chosen.version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            metadata_source=candidate.source,
        )
