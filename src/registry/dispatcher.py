"""Registry dispatch: route raw specifiers to registry clients or the repository path."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from constants import DEFAULT_REGISTRY, REGISTRY_PREFIXES, Registry
from common.errors import ResolutionError, SpecParseError
from common.http_client import HttpClient
from common.logging_utils import Timer, extra_context, is_debug_enabled
from repository.models import ResolvedRepo
from repository.repo_spec import is_repo_spec, parse_repo_spec
from repository.resolver import resolve_repo
from versioning.models import PackageSpec
from versioning.parser import parse_for_registry

from .base import RegistryClient
from .crates import CratesClient
from .maven import MavenClient
from .models import ResolvedPackage
from .npm import NpmClient
from .nuget import NuGetClient
from .packagist import PackagistClient
from .pypi import PyPIClient

logger = logging.getLogger(__name__)

CLIENTS = {
    Registry.NPM: NpmClient,
    Registry.PYPI: PyPIClient,
    Registry.CRATES: CratesClient,
    Registry.MAVEN: MavenClient,
    Registry.NUGET: NuGetClient,
    Registry.PACKAGIST: PackagistClient,
}

INPUT_PACKAGE = "package"
INPUT_REPO = "repo"

Resolved = Union[ResolvedPackage, ResolvedRepo]


def detect_registry(raw: str) -> Tuple[Registry, str]:
    """Split an explicit registry prefix off ``raw``.

    Returns the registry and the remaining specifier. Unprefixed input maps
    to the default registry (npm) unchanged.
    """
    text = raw.strip()
    lowered = text.lower()
    for prefix, registry in REGISTRY_PREFIXES.items():
        if lowered.startswith(prefix):
            return registry, text[len(prefix):].strip()
    return DEFAULT_REGISTRY, text


def has_registry_prefix(raw: str) -> bool:
    lowered = raw.strip().lower()
    return any(lowered.startswith(prefix) for prefix in REGISTRY_PREFIXES)


def detect_input_type(raw: str) -> str:
    """``package`` or ``repo``; an explicit registry prefix always means package."""
    if has_registry_prefix(raw):
        return INPUT_PACKAGE
    return INPUT_REPO if is_repo_spec(raw) else INPUT_PACKAGE


def parse_package_spec(raw: str) -> PackageSpec:
    """Parse a (possibly prefixed) package specifier without network access."""
    if not raw or not raw.strip():
        raise SpecParseError("Empty package specifier.")
    registry, rest = detect_registry(raw)
    if not rest:
        raise SpecParseError(f'Invalid specifier "{raw}": package name is empty.', registry=registry.value)
    return parse_for_registry(registry, rest)


@dataclass(frozen=True)
class ResolutionOutcome:
    """Result of one item in a batch: exactly one of ``result``/``error`` is set."""
    spec: str
    result: Optional[Resolved] = None
    error: Optional[ResolutionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, object]:
        if self.result is not None:
            return {"spec": self.spec, "ok": True, "result": self.result.to_dict()}
        return {
            "spec": self.spec,
            "ok": False,
            "error": {
                "kind": type(self.error).__name__,
                "message": str(self.error),
                "recentVersions": list(getattr(self.error, "recent_versions", []) or []),
            },
        }


class SourceResolver:
    """Entry point: resolve package or repository specifiers.

    One ``HttpClient`` is shared by every registry and hosting client.
    Registry clients are built per resolution, so nothing a client caches
    (such as the NuGet service index) outlives the call that fetched it.
    """

    def __init__(self, http: Optional[HttpClient] = None):
        self.http = http or HttpClient()

    def client_for(self, registry: Registry) -> RegistryClient:
        return CLIENTS[registry](http=self.http)

    def resolve_package(self, spec: Union[str, PackageSpec], allow_prerelease: bool = False) -> ResolvedPackage:
        parsed = parse_package_spec(spec) if isinstance(spec, str) else spec
        return self.client_for(parsed.registry).resolve(parsed, allow_prerelease=allow_prerelease)

    def resolve_repo(self, raw: str) -> ResolvedRepo:
        spec = parse_repo_spec(raw)
        if spec is None:
            raise SpecParseError(f'Invalid repository specifier "{raw}".')
        return resolve_repo(spec, http=self.http)

    def resolve(self, raw: str, allow_prerelease: bool = False) -> Resolved:
        """Resolve one specifier of either kind."""
        kind = detect_input_type(raw)
        logger.info("Resolving %s", raw.strip(), extra=extra_context(
            event="start", component="dispatcher", action="resolve", input_type=kind,
        ))
        with Timer() as t:
            if kind == INPUT_REPO:
                result: Resolved = self.resolve_repo(raw)
            else:
                result = self.resolve_package(raw, allow_prerelease=allow_prerelease)
        if is_debug_enabled(logger):
            logger.debug("Resolution complete", extra=extra_context(
                event="complete", component="dispatcher", action="resolve",
                outcome="success", duration_ms=t.duration_ms(), input_type=kind,
            ))
        return result

    def resolve_many(self, raws: Iterable[str], allow_prerelease: bool = False) -> List[ResolutionOutcome]:
        """Resolve each specifier independently; one failure never stops the batch."""
        outcomes: List[ResolutionOutcome] = []
        for raw in raws:
            try:
                outcomes.append(ResolutionOutcome(spec=raw, result=self.resolve(raw, allow_prerelease)))
            except ResolutionError as exc:
                logger.error("Failed to resolve %s: %s", raw, exc)
                outcomes.append(ResolutionOutcome(spec=raw, error=exc))
        return outcomes
