"""Packagist registry package.

- discovery.py: Composer v2 metadata expansion and repository candidates
- client.py: HTTP interactions with repo.packagist.org and version selection
"""

from .client import PackagistClient  # noqa: F401

__all__ = ["PackagistClient"]
