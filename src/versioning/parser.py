"""Specifier parsing per registry.

Each registry has its own version-separator convention; none of these
functions touch the network. Malformed input raises ``SpecParseError``.
"""

import re
from typing import Callable, Dict, Optional, Tuple

from constants import Registry, REGISTRY_PREFIXES
from common.errors import SpecParseError
from .models import MavenCoordinates, PackageSpec

_NPM_SCOPED = re.compile(r"^(@[^/@]+/[^@]+)(?:@(.*))?$")
_PYPI_EQ = re.compile(r"^([^=<>!~]+)==(.+)$")
_PYPI_RANGE_OPS = re.compile(r"[<>!~=]")


def _clean(value: Optional[str]) -> Optional[str]:
    """Strip a version fragment; empty means unspecified."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def tokenize_rightmost(s: str, sep: str, start: int = 1) -> Tuple[str, Optional[str]]:
    """Return (identifier, version or None) split on the rightmost ``sep``.

    The separator only counts when it occurs at or after index ``start``;
    a leading separator is part of the identifier.
    """
    s = s.strip()
    idx = s.rfind(sep)
    if idx < start:
        return s, None
    return s[:idx].strip(), _clean(s[idx + 1:])


def _require_name(name: str, spec: str, registry: Registry) -> str:
    if not name:
        raise SpecParseError(
            f'Invalid {registry.value} specifier "{spec}": package name is empty.',
            registry=registry.value,
        )
    return name


def parse_npm_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Parse ``name[@version]`` or ``@scope/name[@version]``."""
    trimmed = spec.strip()
    if trimmed.startswith("@"):
        match = _NPM_SCOPED.match(trimmed)
        if not match:
            raise SpecParseError(
                f'Invalid npm specifier "{spec}". Scoped packages look like @scope/name[@version].',
                registry=Registry.NPM.value,
            )
        return match.group(1).strip(), _clean(match.group(2))
    name, version = tokenize_rightmost(trimmed, "@")
    return _require_name(name, spec, Registry.NPM), version


def parse_pypi_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Parse ``name==version``, ``name@version`` or a bare name."""
    trimmed = spec.strip()
    match = _PYPI_EQ.match(trimmed)
    if match:
        return _require_name(match.group(1).strip(), spec, Registry.PYPI), _clean(match.group(2))
    name, version = tokenize_rightmost(trimmed, "@")
    if _PYPI_RANGE_OPS.search(name):
        raise SpecParseError(
            f'Invalid PyPI specifier "{spec}". Only exact versions are supported: name==version.',
            registry=Registry.PYPI.value,
        )
    return _require_name(name, spec, Registry.PYPI), version


def parse_crates_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Parse ``crate[@version]``."""
    name, version = tokenize_rightmost(spec, "@")
    return _require_name(name, spec, Registry.CRATES), version


def parse_nuget_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Parse ``Package.Id[@version]``."""
    name, version = tokenize_rightmost(spec, "@")
    return _require_name(name, spec, Registry.NUGET), version


def parse_maven_spec(spec: str) -> MavenCoordinates:
    """Parse Maven coordinates.

    Supported formats:
        groupId:artifactId
        groupId:artifactId:version
        groupId:artifactId@version

    A trailing ``@version`` wins over a third colon-delimited segment.
    """
    coords, version = tokenize_rightmost(spec, "@")
    parts = [part.strip() for part in coords.split(":")]
    if len(parts) < 2 or len(parts) > 3:
        raise SpecParseError(
            f'Invalid Maven specifier "{spec}". Expected format: groupId:artifactId or groupId:artifactId:version',
            registry=Registry.MAVEN.value,
        )
    group_id, artifact_id = parts[0], parts[1]
    if not group_id or not artifact_id:
        raise SpecParseError(
            f'Invalid Maven specifier "{spec}". groupId and artifactId must not be empty.',
            registry=Registry.MAVEN.value,
        )
    if version is None and len(parts) == 3:
        version = _clean(parts[2])
    return MavenCoordinates(group_id=group_id, artifact_id=artifact_id, version=version)


def parse_packagist_spec(spec: str) -> Tuple[str, Optional[str]]:
    """Parse ``vendor/package`` with an optional ``:`` or ``@`` version.

    Separators are only searched after the vendor/package slash. A colon
    (Composer constraint style) takes precedence over ``@`` because
    versions such as ``dev-main@abc123`` may contain ``@`` themselves.
    """
    trimmed = spec.strip()
    slash = trimmed.find("/")
    if slash <= 0 or slash == len(trimmed) - 1:
        raise SpecParseError(
            f'Invalid Packagist specifier "{spec}". Expected vendor/package[@version].',
            registry=Registry.PACKAGIST.value,
        )
    colon = trimmed.find(":", slash)
    if colon > slash:
        return trimmed[:colon].strip(), _clean(trimmed[colon + 1:])
    at = trimmed.find("@", slash)
    if at > slash:
        return trimmed[:at].strip(), _clean(trimmed[at + 1:])
    return trimmed, None


def _maven_tuple(spec: str) -> Tuple[str, Optional[str]]:
    coords = parse_maven_spec(spec)
    return coords.name, coords.version


PARSERS: Dict[Registry, Callable[[str], Tuple[str, Optional[str]]]] = {
    Registry.NPM: parse_npm_spec,
    Registry.PYPI: parse_pypi_spec,
    Registry.CRATES: parse_crates_spec,
    Registry.MAVEN: _maven_tuple,
    Registry.NUGET: parse_nuget_spec,
    Registry.PACKAGIST: parse_packagist_spec,
}


def parse_for_registry(registry: Registry, spec: str) -> PackageSpec:
    """Parse a prefix-free specifier with the given registry's convention."""
    name, version = PARSERS[registry](spec)
    return PackageSpec(registry=registry, name=name, version=version)


def prefix_for(registry: Registry) -> str:
    """Canonical (first declared) prefix for a registry, e.g. ``pypi:``."""
    for prefix, reg in REGISTRY_PREFIXES.items():
        if reg == registry:
            return prefix
    return f"{registry.value}:"


def format_spec(registry: Registry, name: str, version: Optional[str] = None, *, prefixed: bool = False) -> str:
    """Render a specifier that ``parse_for_registry`` reads back unchanged."""
    text = name
    if version:
        text = f"{name}=={version}" if registry == Registry.PYPI else f"{name}@{version}"
    return f"{prefix_for(registry)}{text}" if prefixed else text
