"""Maven registry package.

- discovery.py: POM parsing and Central search document handling
- client.py: HTTP interactions with Maven Central search and repo1
"""

from .client import MavenClient  # noqa: F401

__all__ = ["MavenClient"]
