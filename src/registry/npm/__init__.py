"""NPM registry package.

- discovery.py: repository candidates from packument metadata
- client.py: HTTP interactions with the npm registry and version selection
"""

from .client import NpmClient  # noqa: F401
from .discovery import _extract_repo_candidates, _parse_repository_field  # noqa: F401

__all__ = ["NpmClient", "_extract_repo_candidates", "_parse_repository_field"]
