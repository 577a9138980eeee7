"""NuGet registry package.

This package provides NuGet package manager support:
- discovery.py: service index lookup, registration leaves and nuspec metadata
- client.py: HTTP interactions with the NuGet V3 API and version selection
"""

from .client import NuGetClient  # noqa: F401
from .discovery import _extract_repo_candidates, _parse_nuspec  # noqa: F401

__all__ = ["NuGetClient", "_extract_repo_candidates", "_parse_nuspec"]
