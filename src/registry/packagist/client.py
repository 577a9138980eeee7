"""Packagist registry client (Composer v2 metadata)."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from constants import Constants, Registry
from common.errors import NotFoundError
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from registry.models import ResolvedPackage
from repository.candidates import select_candidate
from repository.refs import build_ref_candidates, v_tag
from versioning.models import PackageSpec
from versioning.ordering import compare_published, is_dev_version, strip_v
from versioning.parser import parse_for_registry
from versioning.resolver import VersionPolicy, VersionResolver

from .discovery import _extract_repo_candidates, _package_versions, _version_candidates

logger = logging.getLogger(__name__)


def _branch_from_dev(version: str) -> str:
    """``dev-main`` -> ``main``; ``2.x-dev`` -> ``2.x``."""
    lowered = version.lower()
    if lowered.startswith("dev-"):
        return version[4:]
    if lowered.endswith("-dev"):
        return version[:-4]
    return version


class PackagistClient:
    """Registry client for repo.packagist.org ``p2`` metadata."""

    registry = Registry.PACKAGIST

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = base_url or Constants.REGISTRY_URL_PACKAGIST
        self.resolver = VersionResolver(
            VersionPolicy(Registry.PACKAGIST, compare_published, case_insensitive=True)
        )

    def parse(self, spec: str) -> PackageSpec:
        return parse_for_registry(Registry.PACKAGIST, spec)

    def fetch_versions(self, name: str, dev: bool = False) -> List[Dict[str, Any]]:
        """Expanded version entries from ``{name}.json`` (or ``{name}~dev.json``)."""
        suffix = "~dev.json" if dev else ".json"
        document = self.http.get_json(f"{self.base_url}{name.lower()}{suffix}", context="packagist")
        if document is None and not dev:
            raise NotFoundError(
                f'Package "{name}" not found on Packagist.', registry="packagist", package=name
            )
        return _package_versions(document, name)

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        entries = self.fetch_versions(spec.name)
        if spec.version and is_dev_version(spec.version):
            entries = entries + self.fetch_versions(spec.name, dev=True)
        candidates = _version_candidates(entries)

        chosen = self.resolver.resolve(
            spec.name,
            candidates,
            requested=spec.version,
            allow_prerelease=allow_prerelease,
        )
        entry = next(e for e in entries if e.get("version") == chosen.version)
        newest_first = [c.version for c in self.resolver.sorted_desc(candidates)]
        siblings = [
            next(e for e in entries if e.get("version") == version)
            for version in newest_first
            if version != chosen.version
        ]

        candidate, ref = select_candidate(
            _extract_repo_candidates(entry, siblings),
            registry="packagist",
            package=spec.name,
            version=chosen.version,
            recent_versions=self.resolver.recent_versions(candidates),
        )

        if is_dev_version(chosen.version):
            # development versions check out the branch, then the recorded commit
            branch = _branch_from_dev(chosen.version)
            source = entry.get("source") if isinstance(entry.get("source"), dict) else {}
            reference = source.get("reference")
            refs = build_ref_candidates(
                reference if isinstance(reference, str) and reference else branch,
                explicit_tag=branch,
            )
        else:
            refs = build_ref_candidates(
                chosen.version,
                conventions=[v_tag(chosen.version), strip_v(chosen.version)],
            )

        if is_debug_enabled(logger):
            logger.debug("Resolved Packagist package", extra=extra_context(
                event="resolved", component="client", package_manager="packagist",
                package=spec.name, version=chosen.version, target=ref.normalized_url,
                source=candidate.source,
            ))
        return ResolvedPackage(
            registry=Registry.PACKAGIST,
            name=spec.name,
            version=chosen.version,
            repo_url=ref.normalized_url,
            git_tag=refs[0],
            ref_candidates=refs,
            metadata_source=candidate.source,
        )
