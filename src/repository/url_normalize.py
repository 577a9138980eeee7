"""Repository URL normalization.

Collapses the many ways registries spell a source repository (``git+``,
``scm:git:``, SSH, ``git://``, shorthands, deep links into trees or blobs)
into ``https://{host}/{owner}/{repo}`` on an allow-listed host.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlsplit

from constants import Constants

_SCM_PREFIX = re.compile(r"^scm:[a-z0-9]+:", re.IGNORECASE)
_SSH_SCP = re.compile(r"^(?:[\w.\-]+@)?([\w.\-]+\.[a-z]{2,}):(?!\d+/)(.+)$", re.IGNORECASE)
_SHORTHAND = {
    "github:": "github.com",
    "gitlab:": "gitlab.com",
    "bitbucket:": "bitbucket.org",
}
_DEEP_LINK_MARKERS = ("tree", "blob", "src")


@dataclass(frozen=True)
class RepoRef:
    """Normalized repository reference."""
    host: str
    owner: str
    repo: str

    @property
    def normalized_url(self) -> str:
        """Canonical https URL."""
        return f"https://{self.host}/{self.owner}/{self.repo}"

    @property
    def display_name(self) -> str:
        return f"{self.host}/{self.owner}/{self.repo}"


def _strip_wrappers(raw: str) -> str:
    url = raw.strip()
    while True:
        stripped = _SCM_PREFIX.sub("", url, count=1)
        if stripped == url:
            break
        url = stripped
    if url.lower().startswith("git+"):
        url = url[4:]
    return url


def _expand_shorthand(url: str) -> str:
    lowered = url.lower()
    for prefix, host in _SHORTHAND.items():
        if lowered.startswith(prefix):
            return f"https://{host}/{url[len(prefix):].lstrip('/')}"
    return url


def _to_https(url: str) -> str:
    lowered = url.lower()
    if lowered.startswith("ssh://"):
        rest = url[len("ssh://"):]
        if "@" in rest.split("/", 1)[0]:
            rest = rest.split("@", 1)[1]
        # ssh://git@host:owner/repo is occasionally published instead of host/owner
        host, sep, path = rest.partition("/")
        if ":" in host:
            host_only, _, port_or_path = host.partition(":")
            if not port_or_path.isdigit():
                path = f"{port_or_path}/{path}" if sep else port_or_path
            host = host_only
        return f"https://{host}/{path}"
    if lowered.startswith("git://"):
        return "https://" + url[len("git://"):]
    if lowered.startswith("http://"):
        return "https://" + url[len("http://"):]
    if lowered.startswith("https://"):
        return url
    match = _SSH_SCP.match(url)
    if match and "://" not in url:
        return f"https://{match.group(1)}/{match.group(2)}"
    if "://" not in url:
        return f"https://{url}"
    return url


def _split_components(url: str) -> Optional[Tuple[str, list]]:
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme.lower() != "https":
        return None
    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    segments = [seg for seg in parts.path.split("/") if seg]
    return host, segments


def _trim_deep_link(segments: list) -> list:
    """Drop ``/tree/...``, ``/blob/...``, Bitbucket ``/src/...`` and GitLab ``/-/...`` suffixes.

    Other sub-pages (issues, wiki, releases) are left in place so the
    caller rejects them.
    """
    if "-" in segments:
        segments = segments[: segments.index("-")]
    if len(segments) > 2 and segments[2].lower() in _DEEP_LINK_MARKERS:
        segments = segments[:2]
    return segments


def parse_repo_url(raw: Optional[str]) -> Optional[Tuple[str, list]]:
    """Return (host, path segments) after scheme and wrapper cleanup, or None."""
    if not raw or not isinstance(raw, str) or not raw.strip():
        return None
    url = _to_https(_expand_shorthand(_strip_wrappers(raw)))
    return _split_components(url)


def is_allowed_host(host: str) -> bool:
    return host.lower() in {h.lower() for h in Constants.ALLOWED_GIT_HOSTS}


def normalize_repo_url(raw: Optional[str]) -> Optional[RepoRef]:
    """Normalize a repository URL.

    Returns None when the input is empty, points at a host outside the
    allow-list, or does not reduce to exactly ``owner/repo``. Applying the
    function to its own ``normalized_url`` output yields the same result.

    Args:
        raw: URL as published in registry metadata.

    Returns:
        RepoRef or None.
    """
    parsed = parse_repo_url(raw)
    if parsed is None:
        return None
    host, segments = parsed
    if not host or not is_allowed_host(host):
        return None
    segments = _trim_deep_link(segments)
    if len(segments) != 2:
        return None
    owner, repo = segments
    while repo.lower().endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        return None
    return RepoRef(host=host, owner=owner, repo=repo)


def is_known_host_url(raw: Optional[str]) -> bool:
    """True when ``raw`` points at an allow-listed host, whatever its shape."""
    parsed = parse_repo_url(raw)
    return bool(parsed and parsed[0] and is_allowed_host(parsed[0]))
