"""Version orderings and prerelease predicates for each registry family.

All comparators return a negative number, zero or a positive number in the
``cmp`` convention so they can be wrapped with ``functools.cmp_to_key``.
"""

import re
from typing import Callable, List, Optional, Tuple

import semantic_version
from packaging.version import InvalidVersion, Version as Pep440Version

from .models import VersionCandidate

StrComparator = Callable[[str, str], int]
CandidateComparator = Callable[[VersionCandidate, VersionCandidate], int]

_MAVEN_QUALIFIER = re.compile(
    r"(?i)(?:^|[.\-_\d])(alpha|beta|rc|cr|m\d+|milestone|snapshot|preview|ea)(?:[.\-_]?\d+)*(?:$|[.\-_+])"
)
_COMPOSER_UNSTABLE = re.compile(r"(?i)(?:^|[.\-_\d])(alpha|beta|rc|a|b)(?:[.\-_]?\d+)*$")


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _split(version: str) -> Tuple[List[str], List[str], str]:
    """Split into (core components, prerelease identifiers, build metadata)."""
    main, _, build = version.strip().partition("+")
    core, _, pre = main.partition("-")
    return core.split("."), (pre.split(".") if pre else []), build


def _compare_identifier(a: str, b: str) -> int:
    """Numeric identifiers compare numerically and sort before alphanumeric ones."""
    a_num, b_num = a.isdigit(), b.isdigit()
    if a_num and b_num:
        return _sign(int(a) - int(b))
    if a_num != b_num:
        return -1 if a_num else 1
    a_low, b_low = a.lower(), b.lower()
    return (a_low > b_low) - (a_low < b_low)


def compare_versions(a: str, b: str) -> int:
    """Compare two dotted version strings.

    Core components compare numerically, missing components count as zero.
    A release sorts above any prerelease of the same core. Prerelease
    identifiers compare pairwise (numeric before alphanumeric, shorter list
    first when one is a prefix of the other). Build metadata is a final
    lexical tiebreak only.
    """
    a_core, a_pre, a_build = _split(a)
    b_core, b_pre, b_build = _split(b)

    for i in range(max(len(a_core), len(b_core))):
        left = a_core[i] if i < len(a_core) else "0"
        right = b_core[i] if i < len(b_core) else "0"
        result = _compare_identifier(left or "0", right or "0")
        if result:
            return result

    if a_pre and not b_pre:
        return -1
    if b_pre and not a_pre:
        return 1
    for left, right in zip(a_pre, b_pre):
        result = _compare_identifier(left, right)
        if result:
            return result
    if len(a_pre) != len(b_pre):
        return _sign(len(a_pre) - len(b_pre))

    return (a_build > b_build) - (a_build < b_build)


def compare_semver(a: str, b: str) -> int:
    """Semantic-version ordering via ``semantic_version``.

    Falls back to ``compare_versions`` when either side is not valid
    semver, and for the build-metadata tiebreak.
    """
    try:
        left = semantic_version.Version(a)
        right = semantic_version.Version(b)
    except ValueError:
        return compare_versions(a, b)
    left_key = semantic_version.Version(major=left.major, minor=left.minor, patch=left.patch, prerelease=left.prerelease)
    right_key = semantic_version.Version(major=right.major, minor=right.minor, patch=right.patch, prerelease=right.prerelease)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return compare_versions(a, b)


def compare_pep440(a: str, b: str) -> int:
    """PEP 440 ordering; versions that fail to parse sort below valid ones."""
    try:
        left = Pep440Version(a)
    except InvalidVersion:
        left = None
    try:
        right = Pep440Version(b)
    except InvalidVersion:
        right = None
    if left is None and right is None:
        return compare_versions(a, b)
    if left is None:
        return -1
    if right is None:
        return 1
    if left < right:
        return -1
    if left > right:
        return 1
    return (a > b) - (a < b)


def by_version(cmp: StrComparator) -> CandidateComparator:
    """Lift a string comparator to compare ``VersionCandidate`` objects."""
    def _compare(a: VersionCandidate, b: VersionCandidate) -> int:
        return cmp(a.version, b.version)
    return _compare


def _sort_text(candidate: VersionCandidate) -> str:
    """Prefer the first alias (e.g. a normalized form) for tiebreaks."""
    return candidate.aliases[0] if candidate.aliases else candidate.version


def compare_published(a: VersionCandidate, b: VersionCandidate) -> int:
    """Newest publication wins; undated candidates sort lowest.

    Equal or missing timestamps fall back to ``compare_versions`` on the
    normalized version text.
    """
    if a.published_at and b.published_at and a.published_at != b.published_at:
        return -1 if a.published_at < b.published_at else 1
    if a.published_at and not b.published_at:
        return 1
    if b.published_at and not a.published_at:
        return -1
    return compare_versions(_sort_text(a), _sort_text(b))


def is_semver_prerelease(version: str) -> bool:
    """True when the version carries a semver prerelease component."""
    try:
        return bool(semantic_version.Version(version).prerelease)
    except ValueError:
        return "-" in version.split("+", 1)[0]


def is_pep440_prerelease(version: str) -> bool:
    """True for PEP 440 pre and dev releases; unparsable versions are not flagged."""
    try:
        return Pep440Version(version).is_prerelease
    except InvalidVersion:
        return False


def is_maven_prerelease(version: str) -> bool:
    """True for alpha, beta, RC, milestone, snapshot and similar qualifiers."""
    return bool(_MAVEN_QUALIFIER.search(version))


def is_nuget_prerelease(version: str) -> bool:
    """NuGet marks prereleases with a hyphen before any build metadata."""
    return "-" in version.split("+", 1)[0]


def is_dev_version(version: str) -> bool:
    """Composer development branches: ``dev-main``, ``2.x-dev``, ``1.0-dev@abc``."""
    lowered = version.lower()
    return lowered.startswith("dev-") or lowered.endswith("-dev") or "-dev@" in lowered


def is_packagist_prerelease(version: str) -> bool:
    """Composer stability below ``stable``: dev branches and alpha/beta/RC tags."""
    return is_dev_version(version) or bool(_COMPOSER_UNSTABLE.search(version))


def strip_v(version: str) -> str:
    """Drop a leading ``v``/``V`` from a tag-like version."""
    return version[1:] if version[:1] in ("v", "V") and version[1:2].isdigit() else version


def normalize_pep440(version: str) -> Optional[str]:
    """Canonical PEP 440 spelling (``1.0.0-RC1`` -> ``1.0.0rc1``) or None."""
    try:
        return str(Pep440Version(version))
    except InvalidVersion:
        return None
