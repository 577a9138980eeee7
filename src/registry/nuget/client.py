"""NuGet registry client: resolve packages via the V3 service index and registration API."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from constants import Constants, Registry
from common.errors import NotFoundError, TransportError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from registry.models import ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, v_tag
from versioning.models import PackageSpec
from versioning.ordering import by_version, compare_versions
from versioning.parser import parse_for_registry
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import (
    PACKAGE_BASE_TYPES,
    REGISTRATION_TYPES,
    _extract_repo_candidates,
    _find_resource,
    _leaf_repository,
    _leaf_version,
    _parse_nuspec,
    _version_candidates,
)

logger = logging.getLogger(__name__)


class NuGetClient:
    """Registry client for nuget.org (V3 protocol).

    The service index is fetched at most once per client instance.
    """

    registry = Registry.NUGET

    def __init__(self, http: Optional[HttpClient] = None, service_index_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.service_index_url = service_index_url or Constants.REGISTRY_URL_NUGET_V3
        self.resolver = VersionResolver(
            VersionPolicy(Registry.NUGET, by_version(compare_versions), case_insensitive=True)
        )
        self._service_index: Optional[Dict[str, Any]] = None

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.NUGET, spec)

    def service_index(self) -> Dict[str, Any]:
        if self._service_index is None:
            document = self.http.get_json(self.service_index_url, context="nuget")
            if not isinstance(document, dict):
                raise TransportError(
                    f"NuGet service index unavailable at {self.service_index_url}",
                    url=self.service_index_url,
                    registry="nuget",
                )
            self._service_index = document
        return self._service_index

    def _resource(self, type_prefixes: List[str]) -> str:
        base = _find_resource(self.service_index(), type_prefixes)
        if base is None:
            raise TransportError(
                f"NuGet service index does not advertise {type_prefixes[-1]}",
                url=self.service_index_url,
                registry="nuget",
            )
        return base

    def fetch_leaves(self, package_id: str) -> List[Dict[str, Any]]:
        """All registration leaves for a package, oldest first.

        Pages are inlined for small packages; larger ones are fetched by
        their ``@id``. A 404 on the index means the package does not exist.
        """
        lower = quote(package_id.lower(), safe="")
        index = self.http.get_json(f"{self._resource(REGISTRATION_TYPES)}{lower}/index.json", context="nuget")
        if not isinstance(index, dict):
            return []
        leaves: List[Dict[str, Any]] = []
        for page in index.get("items") or []:
            if not isinstance(page, dict):
                continue
            items = page.get("items")
            if not items and isinstance(page.get("@id"), str):
                fetched = self.http.get_json(page["@id"], context="nuget")
                items = fetched.get("items") if isinstance(fetched, dict) else None
                if not items:
                    logger.warning(
                        "NuGet registration page %s for %s could not be expanded",
                        safe_url(page["@id"]), package_id,
                    )
            leaves.extend(item for item in items or [] if isinstance(item, dict))
        return leaves

    def fetch_nuspec(self, package_id: str, version: str) -> Optional[Dict[str, Optional[str]]]:
        """Parsed nuspec for one version; None when the flat container has none."""
        lower = quote(package_id.lower(), safe="")
        ver_lower = quote(version.lower(), safe="")
        url = f"{self._resource(PACKAGE_BASE_TYPES)}{lower}/{ver_lower}/{lower}.nuspec"
        text = self.http.get_text(url, context="nuget")
        if text is None:
            return None
        return _parse_nuspec(text)

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        leaves = self.fetch_leaves(spec.name)
        if not leaves:
            raise NotFoundError(
                f'Package "{spec.name}" not found on NuGet.', registry="nuget", package=spec.name
            )
        candidates = _version_candidates(leaves)
        chosen = self.resolver.resolve(
            spec.name,
            candidates,
            requested=spec.version,
            allow_prerelease=allow_prerelease,
        )

        wanted = chosen.version.lower()
        leaf = next(leaf for leaf in leaves if (_leaf_version(leaf) or "").lower() == wanted)
        siblings = [other for other in leaves if other is not leaf]
        nuspec = None
        if _leaf_repository(leaf) is None:
            nuspec = self.fetch_nuspec(spec.name, chosen.version)

        candidate, ref = select_candidate(
            _extract_repo_candidates(leaf, nuspec, siblings),
            registry="nuget",
            package=spec.name,
            version=chosen.version,
            recent_versions=self.resolver.recent_versions(candidates),
        )
        refs = build_ref_candidates(chosen.version, conventions=[v_tag(chosen.version)])

        if is_debug_enabled(logger):
            logger.debug("Resolved NuGet package", extra=extra_context(
                event="resolved", component="client", package_manager="nuget",
                package=spec.name, version=chosen.version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.NUGET,
            name=spec.name,
            version=chosen.version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            metadata_source=candidate.source,
        )
