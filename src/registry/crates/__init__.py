"""crates.io registry package.

- discovery.py: repository candidates and version lists from crate documents
- client.py: HTTP interactions with the crates.io API and version selection
"""

from .client import CratesClient  # noqa: F401

__all__ = ["CratesClient"]
