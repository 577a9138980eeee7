"""Exceptions raised by the resolution engine.

Every error carries enough context (registry, package, version and, where
known, a short list of recent versions) to be actionable without another
lookup. None of these are retried inside the engine.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class ResolutionError(Exception):
    """Base class for every failure surfaced by the resolver.

    Attributes:
        registry: Registry identifier (e.g. "npm") when applicable.
        package: Package name or repository display name.
        version: Requested or resolved version when applicable.
        recent_versions: Recent published versions, newest first.
        context: Additional error details for debugging.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        message: str,
        *,
        registry: Optional[str] = None,
        package: Optional[str] = None,
        version: Optional[str] = None,
        recent_versions: Optional[Sequence[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry
        self.package = package
        self.version = version
        self.recent_versions: List[str] = list(recent_versions or [])
        self.context = context or {}
        if self.recent_versions:
            message = f"{message} Recent versions: {', '.join(self.recent_versions)}"
        super().__init__(message)


class SpecParseError(ResolutionError):
    """Malformed specifier; raised before any network access."""


class NotFoundError(ResolutionError):
    """Package, artifact, repository or exact version absent from the registry."""


class VersionResolutionError(ResolutionError):
    """No published version is acceptable under the current policy."""


class NoRepositoryMetadataError(ResolutionError):
    """No usable source-control URL found after checking all candidates."""


class InvalidRepositoryUrlError(NoRepositoryMetadataError):
    """A candidate on a known git host existed but could not be normalized."""

    def __init__(self, message: str, *, url: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.url = url


class TransportError(ResolutionError):
    """Network or HTTP failure other than a confirmed not-found response."""

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code
