"""PyPI registry package.

- discovery.py: repository candidates and release lists from JSON API documents
- client.py: HTTP interactions with the PyPI JSON API and version selection
"""

from .client import PyPIClient  # noqa: F401
from .discovery import _extract_repo_candidates  # noqa: F401

__all__ = ["PyPIClient", "_extract_repo_candidates"]
