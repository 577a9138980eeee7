"""Interface every registry client provides."""

from typing import Protocol

from constants import Registry
from versioning.models import PackageSpec
from .models import ResolvedPackage


class RegistryClient(Protocol):
    """Resolves specifiers for one registry.

    ``parse`` is pure. ``resolve`` performs network lookups through the
    client's ``HttpClient`` and either returns a ``ResolvedPackage`` or
    raises a ``ResolutionError`` subclass.
    """

    registry: Registry

    def parse(self, spec: str) -> PackageSpec:
        ...

    def resolve(self, spec: PackageSpec, *, allow_prerelease: bool = False) -> ResolvedPackage:
        ...
