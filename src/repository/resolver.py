"""Resolve direct repository specifiers to a concrete ref."""

import logging
from typing import Callable, Dict, Optional

from constants import Constants
from common.http_client import HttpClient
from common.logging_utils import extra_context, is_debug_enabled
from .bitbucket import BitbucketClient
from .github import GitHubClient
from .gitlab import GitLabClient
from .models import RepoSpec, ResolvedRepo

logger = logging.getLogger(__name__)

HOST_CLIENTS: Dict[str, Callable[[HttpClient], object]] = {
    "github.com": lambda http: GitHubClient(http=http),
    "gitlab.com": lambda http: GitLabClient(http=http),
    "bitbucket.org": lambda http: BitbucketClient(http=http),
}


def resolve_repo(spec: RepoSpec, http: Optional[HttpClient] = None) -> ResolvedRepo:
    """Confirm the repository exists and pick the ref to check out.

    An explicit ref from the specifier is kept as-is; otherwise the host's
    default branch is used. Hosts without an API client are not contacted
    and fall back to ``Constants.DEFAULT_BRANCH_FALLBACK``.
    """
    host = spec.host.lower()
    factory = HOST_CLIENTS.get(host)
    ref = spec.ref
    if factory is not None:
        client = factory(http or HttpClient())
        default_branch = client.get_default_branch(spec.owner, spec.repo)
        if not ref:
            ref = default_branch
    if not ref:
        logger.warning(
            "No default branch known for %s/%s/%s; using %s",
            host, spec.owner, spec.repo, Constants.DEFAULT_BRANCH_FALLBACK,
        )
        ref = Constants.DEFAULT_BRANCH_FALLBACK

    if is_debug_enabled(logger):
        logger.debug("Resolved repository", extra=extra_context(
            event="resolved", component="repo_resolver", target=f"{host}/{spec.owner}/{spec.repo}",
            ref=ref, explicit_ref=bool(spec.ref),
        ))
    return ResolvedRepo(
        host=host,
        owner=spec.owner,
        repo=spec.repo,
        ref=ref,
        repo_url=f"https://{host}/{spec.owner}/{spec.repo}",
        display_name=f"{host}/{spec.owner}/{spec.repo}",
    )
