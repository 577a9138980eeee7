"""Result types shared by registry clients."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from constants import Registry


@dataclass(frozen=True)
class MetadataCandidate:
    """One repository URL found in registry metadata.

    ``source`` names the field it came from (``repository``, ``projectUrl``,
    ``scm.connection`` ...). ``from_sibling`` marks candidates taken from a
    different version's metadata than the one being resolved.
    """
    source: str
    raw_url: str
    directory: Optional[str] = None
    tag: Optional[str] = None
    from_sibling: bool = False


@dataclass(frozen=True)
class ResolvedPackage:
    """A package version pinned to its source repository.

    ``git_tag`` is always ``ref_candidates[0]``; the remaining entries are
    fallbacks to try in order when checking out.
    """
    registry: Registry
    name: str
    version: str
    repo_url: str
    git_tag: str
    ref_candidates: Tuple[str, ...] = field(default_factory=tuple)
    repo_directory: Optional[str] = None
    metadata_source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view used by the CLI."""
        return {
            "type": "package",
            "registry": self.registry.value,
            "name": self.name,
            "version": self.version,
            "repoUrl": self.repo_url,
            "repoDirectory": self.repo_directory,
            "gitTag": self.git_tag,
            "refCandidates": list(self.ref_candidates),
            "metadataSource": self.metadata_source,
        }
