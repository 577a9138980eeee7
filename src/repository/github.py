"""GitHub API client for repository information.

Only the repository endpoint is used: it confirms the repository exists
and reports its default branch.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from constants import Constants
from common.errors import NotFoundError, TransportError
from common.http_client import HttpClient
from .auth import github_token


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional authentication via SRCPIN_GITHUB_TOKEN or GITHUB_TOKEN.
    """

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None, token: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or github_token()

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def get_repo(self, owner: str, repo: str) -> Dict[str, Any]:
        """Fetch repository metadata.

        Raises:
            NotFoundError: The repository does not exist or is private.
            TransportError: Rate limiting or any other API failure.
        """
        url = f"{self.base_url}/repos/{owner}/{repo}"
        res = self.http.get(url, context="github", headers=self._get_headers())
        if res.status_code == 404:
            raise NotFoundError(
                f'Repository "{owner}/{repo}" not found on GitHub. Make sure it exists and is public.',
                package=f"{owner}/{repo}",
            )
        if res.status_code == 403:
            raise TransportError(
                "GitHub API rate limit exceeded. Try again later or set GITHUB_TOKEN.",
                url=url,
                status_code=403,
                package=f"{owner}/{repo}",
            )
        if not 200 <= res.status_code < 300:
            raise TransportError(
                f"Failed to fetch repository info from GitHub: HTTP {res.status_code}",
                url=url,
                status_code=res.status_code,
                package=f"{owner}/{repo}",
            )
        try:
            data = json.loads(res.text)
        except json.JSONDecodeError as exc:
            raise TransportError(f"GitHub returned invalid JSON for {owner}/{repo}", url=url) from exc
        return data if isinstance(data, dict) else {}

    def get_default_branch(self, owner: str, repo: str) -> Optional[str]:
        branch = self.get_repo(owner, repo).get("default_branch")
        return branch if isinstance(branch, str) and branch else None
