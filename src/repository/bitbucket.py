"""Bitbucket Cloud API client for repository information."""
from __future__ import annotations

from typing import Any, Dict, Optional

from constants import Constants
from common.errors import NotFoundError
from common.http_client import HttpClient


class BitbucketClient:
    """Reads ``mainbranch`` from the Bitbucket 2.0 repositories endpoint."""

    def __init__(self, http: Optional[HttpClient] = None, base_url: Optional[str] = None):
        self.http = http or HttpClient()
        self.base_url = (base_url or Constants.BITBUCKET_API_BASE).rstrip("/")

    def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        url = f"{self.base_url}/repositories/{owner}/{repo}"
        data = self.http.get_json(url, context="bitbucket")
        if data is None:
            raise NotFoundError(
                f'Repository "{owner}/{repo}" not found on Bitbucket. Make sure it exists and is public.',
                package=f"{owner}/{repo}",
            )
        return data if isinstance(data, dict) else {}

    def get_default_branch(self, owner: str, repo: str) -> Optional[str]:
        mainbranch = self.get_repository(owner, repo).get("mainbranch")
        if isinstance(mainbranch, dict) and isinstance(mainbranch.get("name"), str):
            return mainbranch["name"] or None
        return None
