"""Direct repository reference types."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RepoSpec:
    """Parsed direct repository reference; ``ref`` may be a branch, tag or commit."""
    host: str
    owner: str
    repo: str
    ref: Optional[str] = None


@dataclass(frozen=True)
class ResolvedRepo:
    """A repository with a concrete ref to check out."""
    host: str
    owner: str
    repo: str
    ref: str
    repo_url: str
    display_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "repo",
            "host": self.host,
            "owner": self.owner,
            "repo": self.repo,
            "ref": self.ref,
            "repoUrl": self.repo_url,
            "displayName": self.display_name,
        }
