"""Consume ordered ref candidates against an external cloner."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from common.errors import TransportError
from common.logging_utils import safe_url
from .auth import authenticated_clone_url

logger = logging.getLogger(__name__)


class CloneError(Exception):
    """Raised by a ``Cloner`` when a clone attempt fails."""


class Cloner(Protocol):
    """Performs the actual clone; ``ref=None`` means the default branch."""

    def clone(self, url: str, ref: Optional[str]) -> None:
        ...


@dataclass(frozen=True)
class CheckoutResult:
    """Which ref was checked out; ``ref`` is None for the default branch."""
    ref: Optional[str]
    used_default_branch: bool
    tried: List[str]


def checkout_first_available(
    cloner: Cloner,
    repo_url: str,
    candidates: Sequence[str],
    *,
    use_auth: bool = True,
) -> CheckoutResult:
    """Clone the first ref in ``candidates`` that exists.

    When no candidate can be cloned the default branch is used instead,
    with a warning. If even that fails a single ``TransportError`` names the
    repository and every ref that was tried.
    """
    url = (authenticated_clone_url(repo_url) if use_auth else None) or repo_url
    tried: List[str] = []
    for ref in candidates:
        tried.append(ref)
        try:
            cloner.clone(url, ref)
        except CloneError as exc:
            logger.debug("Ref %s not available in %s: %s", ref, safe_url(repo_url), exc)
            continue
        return CheckoutResult(ref=ref, used_default_branch=False, tried=tried)

    if tried:
        logger.warning(
            "None of %s found in %s; cloning the default branch instead",
            ", ".join(tried), safe_url(repo_url),
        )
    try:
        cloner.clone(url, None)
    except CloneError as exc:
        raise TransportError(
            f"Could not clone {safe_url(repo_url)}: tried {', '.join(tried) or 'no refs'} and the default branch",
            url=safe_url(repo_url),
            context={"tried": tried},
        ) from exc
    return CheckoutResult(ref=None, used_default_branch=True, tried=tried)
