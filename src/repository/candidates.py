"""Pick the repository URL to use from registry metadata candidates."""

import logging
from typing import List, Optional, Sequence, Tuple

from common.errors import InvalidRepositoryUrlError, NoRepositoryMetadataError
from common.logging_utils import extra_context, is_debug_enabled
from registry.models import MetadataCandidate
from .url_normalize import RepoRef, is_known_host_url, normalize_repo_url

logger = logging.getLogger(__name__)


def select_candidate(  # pylint: disable=too-many-arguments
    candidates: Sequence[MetadataCandidate],
    *,
    registry: str,
    package: str,
    version: Optional[str] = None,
    recent_versions: Optional[List[str]] = None,
) -> Tuple[MetadataCandidate, RepoRef]:
    """Return the first candidate that normalizes to a supported repository.

    Candidates are tried in the order given, except that candidates taken
    from sibling versions always come after the version's own.

    Raises:
        InvalidRepositoryUrlError: Candidates existed but none survived
            normalization or the host allow-list. The reported URL prefers a
            candidate on a supported host with an unusable shape.
        NoRepositoryMetadataError: The metadata carried no candidates at all.
    """
    ordered = sorted(candidates, key=lambda c: c.from_sibling)
    malformed: Optional[MetadataCandidate] = None
    rejected: Optional[MetadataCandidate] = None
    for candidate in ordered:
        ref = normalize_repo_url(candidate.raw_url)
        if ref is not None:
            if is_debug_enabled(logger):
                logger.debug(
                    "Repository candidate accepted",
                    extra=extra_context(
                        event="decision",
                        component="candidates",
                        action="select_candidate",
                        registry=registry,
                        package=package,
                        source=candidate.source,
                        from_sibling=candidate.from_sibling,
                        target=ref.normalized_url,
                    ),
                )
            if candidate.from_sibling:
                logger.warning(
                    "No repository in %s metadata for %s; using %s from another version",
                    registry, package if not version else f"{package}@{version}", candidate.source,
                )
            return candidate, ref
        if malformed is None and is_known_host_url(candidate.raw_url):
            malformed = candidate
        if rejected is None:
            rejected = candidate
        if is_debug_enabled(logger):
            logger.debug(
                "Repository candidate rejected",
                extra=extra_context(
                    event="decision",
                    component="candidates",
                    action="select_candidate",
                    registry=registry,
                    package=package,
                    source=candidate.source,
                    outcome="rejected",
                ),
            )

    label = f"{package}@{version}" if version else package
    offender = malformed or rejected
    if offender is not None:
        raise InvalidRepositoryUrlError(
            f"No supported repository URL for {label}; rejected {offender.source}: {offender.raw_url}",
            url=offender.raw_url,
            registry=registry,
            package=package,
            version=version,
            recent_versions=recent_versions,
        )
    raise NoRepositoryMetadataError(
        f"No supported repository URL found in {registry} metadata for {label}.",
        registry=registry,
        package=package,
        version=version,
        recent_versions=recent_versions,
    )
