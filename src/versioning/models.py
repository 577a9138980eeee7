"""Data models for specifiers and version resolution."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from constants import Registry


@dataclass(frozen=True)
class PackageSpec:
    """Parsed package specifier.

    ``name`` is registry-native; Maven stores ``groupId:artifactId``.
    """
    registry: Registry
    name: str
    version: Optional[str] = None

    @property
    def display(self) -> str:
        """Human-readable ``name@version`` form used in messages."""
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass(frozen=True)
class MavenCoordinates:
    """Maven ``groupId:artifactId[:version]`` coordinates."""
    group_id: str
    artifact_id: str
    version: Optional[str] = None

    @property
    def name(self) -> str:
        """Compound registry-native name."""
        return f"{self.group_id}:{self.artifact_id}"


@dataclass(frozen=True)
class VersionCandidate:
    """One published version as reported by a registry.

    ``aliases`` lists alternate spellings accepted for exact requests
    (e.g. a Packagist ``version_normalized``). ``yanked`` covers yanked
    and unlisted releases: they satisfy exact requests only.
    """
    version: str
    is_prerelease: bool = False
    published_at: Optional[datetime] = None
    yanked: bool = False
    aliases: Tuple[str, ...] = field(default_factory=tuple)
