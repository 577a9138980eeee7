"""Tag candidates for checking out a resolved version."""

from typing import Iterable, Optional, Tuple

from constants import Constants


def v_tag(version: str) -> str:
    """``1.2.3`` -> ``v1.2.3``; versions already starting with ``v`` are kept."""
    return version if version[:1] in ("v", "V") else f"v{version}"


def is_sentinel_tag(tag: Optional[str]) -> bool:
    """True for tags that carry no information, such as Maven's ``HEAD``."""
    if tag is None:
        return True
    return tag.strip().upper() in {s.upper() for s in Constants.NO_TAG_SENTINELS}


def build_ref_candidates(
    version: str,
    *,
    explicit_tag: Optional[str] = None,
    conventions: Iterable[str] = (),
) -> Tuple[str, ...]:
    """Ordered, de-duplicated list of refs to try for ``version``.

    A tag published in package metadata comes first, then the registry's
    naming conventions, then the bare version string.
    """
    ordered = []
    if not is_sentinel_tag(explicit_tag):
        ordered.append(explicit_tag.strip())
    ordered.extend(c for c in conventions if c)
    ordered.append(version)
    seen = set()
    result = []
    for ref in ordered:
        if ref not in seen:
            seen.add(ref)
            result.append(ref)
    return tuple(result)
