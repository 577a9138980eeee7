"""Version selection policy shared by every registry client."""

import functools
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from constants import Constants, Registry
from common.errors import NotFoundError, VersionResolutionError
from common.logging_utils import extra_context, is_debug_enabled
from .models import VersionCandidate
from .ordering import CandidateComparator
from .parser import format_spec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VersionPolicy:
    """How a registry orders versions and matches explicit requests."""
    registry: Registry
    compare: CandidateComparator
    case_insensitive: bool = False
    # maps a requested spelling onto the canonical one, e.g. PEP 440 normalization
    normalize: Optional[Callable[[str], Optional[str]]] = None


class VersionResolver:
    """Pick the concrete version to use for a package.

    Explicit requests must match a published version exactly (or one of its
    aliases). Otherwise the newest stable, non-yanked version is chosen; the
    registry's own "latest" pointer is trusted only when it points into that
    stable pool.
    """

    def __init__(self, policy: VersionPolicy):
        self.policy = policy

    def _matches(self, candidate: VersionCandidate, requested: str) -> bool:
        spellings = (candidate.version,) + tuple(candidate.aliases)
        if self.policy.normalize is not None:
            canonical = self.policy.normalize(requested)
            if canonical and canonical in spellings:
                return True
        if self.policy.case_insensitive:
            wanted = requested.lower()
            return any(s.lower() == wanted for s in spellings)
        return requested in spellings

    def sorted_desc(self, candidates: Sequence[VersionCandidate]) -> List[VersionCandidate]:
        """Candidates newest first under the policy ordering."""
        return sorted(candidates, key=functools.cmp_to_key(self.policy.compare), reverse=True)

    def recent_versions(self, candidates: Sequence[VersionCandidate], limit: Optional[int] = None) -> List[str]:
        """Up to ``limit`` recent non-yanked version strings, newest first."""
        limit = Constants.RECENT_VERSIONS_LIMIT if limit is None else limit
        visible = [c for c in candidates if not c.yanked] or list(candidates)
        return [c.version for c in self.sorted_desc(visible)[:limit]]

    def find_exact(self, candidates: Sequence[VersionCandidate], requested: str) -> Optional[VersionCandidate]:
        """Return the candidate matching ``requested``, preferring the literal spelling."""
        for candidate in candidates:
            if candidate.version == requested:
                return candidate
        for candidate in candidates:
            if self._matches(candidate, requested):
                return candidate
        return None

    def resolve(  # pylint: disable=too-many-arguments
        self,
        package: str,
        candidates: Sequence[VersionCandidate],
        requested: Optional[str] = None,
        allow_prerelease: bool = False,
        latest_hint: Optional[str] = None,
    ) -> VersionCandidate:
        """Select a version.

        Args:
            package: Registry-native package name, used in messages.
            candidates: Every version the registry reports.
            requested: Explicit version from the specifier, if any.
            allow_prerelease: Admit prereleases to the default pool.
            latest_hint: The registry's own "latest" pointer, if it has one.

        Returns:
            The chosen ``VersionCandidate``.

        Raises:
            NotFoundError: An explicit version is not published.
            VersionResolutionError: No acceptable version exists.
        """
        registry = self.policy.registry.value
        if requested:
            match = self.find_exact(candidates, requested)
            if match is None:
                raise NotFoundError(
                    f'Version "{requested}" of {package} was not found on {registry}.',
                    registry=registry,
                    package=package,
                    version=requested,
                    recent_versions=self.recent_versions(candidates),
                )
            return match

        if not candidates:
            raise VersionResolutionError(
                f"No published versions found for {package} on {registry}.",
                registry=registry,
                package=package,
            )

        pool = [
            c for c in candidates
            if not c.yanked and (allow_prerelease or not c.is_prerelease)
        ]
        if not pool:
            if allow_prerelease:
                message = f"Every published version of {package} is yanked or unlisted."
            else:
                suggestion = format_spec(self.policy.registry, package, "<version>", prefixed=True)
                message = (
                    f"No stable version found for {package}. Specify a prerelease "
                    f"version explicitly (for example: {suggestion})."
                )
            raise VersionResolutionError(
                message,
                registry=registry,
                package=package,
                recent_versions=self.recent_versions(candidates),
            )

        chosen = None
        if latest_hint and not allow_prerelease:
            chosen = next((c for c in pool if c.version == latest_hint), None)
        if chosen is None:
            chosen = max(pool, key=functools.cmp_to_key(self.policy.compare))

        if is_debug_enabled(logger):
            logger.debug(
                "Version selected",
                extra=extra_context(
                    event="version_selected",
                    component="version_resolver",
                    registry=registry,
                    package=package,
                    version=chosen.version,
                    pool_size=len(pool),
                    candidate_count=len(candidates),
                    used_latest_hint=bool(latest_hint and chosen.version == latest_hint),
                ),
            )
        return chosen
