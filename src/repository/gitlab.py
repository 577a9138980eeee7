"""GitLab API client for repository information.

Provides a lightweight REST client for confirming a GitLab project exists
and reading its default branch.
"""
from __future__ import annotations

from typing import Any, Dict, Optional
from urllib.parse import quote

from constants import Constants
from common.errors import NotFoundError
from common.http_client import HttpClient
from .auth import gitlab_token


class GitLabClient:
    """Lightweight REST client for GitLab API operations.

    Supports optional authentication via SRCPIN_GITLAB_TOKEN or GITLAB_TOKEN.
    """

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None, token: Optional[str] = None):
        """Initialize GitLab client.

        Args:
            http: HTTP capability (defaults to a new HttpClient)
            base_url: Base URL for GitLab API (defaults to Constants.GITLAB_API_BASE)
            token: GitLab personal access token (defaults to the environment)
        """
        self.http = http or HttpClient()
        self.base_url = (base_url or Constants.GITLAB_API_BASE).rstrip("/")
        self.token = token or gitlab_token()

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {}
        if self.token:
            headers['Private-Token'] = self.token
        return headers

    def get_project(self, owner: str, repo: str) -> Dict[str, Any]:
        """Fetch project metadata.

        Args:
            owner: Project owner/namespace
            repo: Project name

        Returns:
            Dict with default_branch, web_url and http_url_to_repo

        Raises:
            NotFoundError: The project does not exist or is private.
        """
        # URL encode the project path
        project_path = quote(f"{owner}/{repo}", safe='')
        url = f"{self.base_url}/projects/{project_path}"

        data = self.http.get_json(url, context="gitlab", headers=self._get_headers())
        if data is None:
            raise NotFoundError(
                f'Repository "{owner}/{repo}" not found on GitLab. Make sure it exists and is public.',
                package=f"{owner}/{repo}",
            )
        if not isinstance(data, dict):
            return {}
        return {
            'default_branch': data.get('default_branch'),
            'web_url': data.get('web_url'),
            'http_url_to_repo': data.get('http_url_to_repo'),
        }

    def get_default_branch(self, owner: str, repo: str) -> Optional[str]:
        branch = self.get_project(owner, repo).get('default_branch')
        return branch if isinstance(branch, str) and branch else None
