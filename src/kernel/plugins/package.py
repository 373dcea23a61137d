"""Packages and the repositories that list them.

A Package is the unit produced by the package manager. Two repositories
are provided:

1. InstalledPackageRepository: the distributions installed in the current
   environment (importlib.metadata). Plugin declarations come from entry
   points, 'replaces' from the Provides-Dist / Obsoletes-Dist fields.
2. ManifestPackageRepository: a JSON manifest listing packages with their
   'extra' document, the equivalent of a package manager's lock file.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from importlib import metadata
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol

from kernel.plugins.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_METADATA_KEY = "kernel-plugin"
DEFAULT_ENTRY_POINT_GROUP = "kernel.plugins"

_NAME_SEPARATORS = re.compile(r"[-_.]+")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def normalize_name(name: str) -> str:
    """Normalize a distribution name (PEP 503): 'Foo_Bar.baz' -> 'foo-bar-baz'."""
    return _NAME_SEPARATORS.sub("-", name).lower()


def requirement_name(spec: str) -> str | None:
    """Extract the project name from a 'name (>=1.0); extra' style field."""
    match = _REQUIREMENT_NAME.match(spec)
    if match is None:
        return None
    return normalize_name(match.group(1))


@dataclass(frozen=True)
class Package:
    """An installed package as seen by the resolver.

    Attributes:
        name: Normalized package name.
        extra: Arbitrary metadata document; plugin declarations live under
            a single well-known key.
        replaces: Names of packages this one replaces.
        complete: False for alias or partially-installed entries, which
            are never scanned for plugins.
    """

    name: str
    extra: dict[str, Any] = field(default_factory=dict)
    replaces: tuple[str, ...] = ()
    complete: bool = True


class PackageRepository(Protocol):
    """Enumerates packages in a stable order."""

    def get_packages(self) -> list[Package]:
        ...


def complete_packages(repository: PackageRepository) -> Iterator[Package]:
    """Yield only the complete packages of a repository, in its order."""
    for package in repository.get_packages():
        if not package.complete:
            logger.debug(f"Skipping incomplete package: {package.name}")
            continue
        yield package


class InstalledPackageRepository:
    """Packages installed in the running interpreter's environment."""

    def __init__(
        self,
        metadata_key: str = DEFAULT_METADATA_KEY,
        entry_point_group: str = DEFAULT_ENTRY_POINT_GROUP,
        distributions: Iterable[metadata.Distribution] | None = None,
    ) -> None:
        self.metadata_key = metadata_key
        self.entry_point_group = entry_point_group
        self._distributions = distributions

    def get_packages(self) -> list[Package]:
        dists = self._distributions
        if dists is None:
            dists = metadata.distributions()

        packages: dict[str, Package] = {}
        for dist in dists:
            package = self._to_package(dist)
            # First hit on sys.path shadows later ones, as the importer does
            if package.name in packages:
                continue
            packages[package.name] = package

        # sys.path scan order differs between machines; names do not
        return [packages[name] for name in sorted(packages)]

    def _to_package(self, dist: metadata.Distribution) -> Package:
        raw_name = dist.metadata.get("Name")
        if not raw_name:
            # Broken or half-removed install
            return Package(name="", complete=False)

        name = normalize_name(raw_name)
        extra: dict[str, Any] = {}
        declared = {
            ep.name: ep.value
            for ep in dist.entry_points
            if ep.group == self.entry_point_group
        }
        if declared:
            extra[self.metadata_key] = declared

        replaces: list[str] = []
        for field_name in ("Provides-Dist", "Obsoletes-Dist"):
            for spec in dist.metadata.get_all(field_name) or []:
                replaced = requirement_name(spec)
                if replaced and replaced != name and replaced not in replaces:
                    replaces.append(replaced)

        return Package(name=name, extra=extra, replaces=tuple(replaces))


class ManifestPackageRepository:
    """Packages listed in a JSON manifest file.

    The manifest is either a list of package objects or an object with a
    "packages" list. Each package object has:

        name     : required
        extra    : optional mapping
        replaces : optional list of names, or mapping keyed by name
        alias    : optional bool; alias entries are incomplete

    Package order is the manifest order.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get_packages(self) -> list[Package]:
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read package manifest {self.path}: {e}") from e
        return parse_manifest(document, source=str(self.path))


def parse_manifest(document: Any, source: str = "<manifest>") -> list[Package]:
    """Build packages from an already-decoded manifest document."""
    if isinstance(document, dict):
        document = document.get("packages")
    if not isinstance(document, list):
        raise ConfigError(f'Package manifest {source} must contain a "packages" list.')

    packages: list[Package] = []
    for index, entry in enumerate(document):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ConfigError(f"Package #{index} in {source} has no name.")

        extra = entry.get("extra") or {}
        if not isinstance(extra, dict):
            raise ConfigError(f'The "extra" of package "{entry["name"]}" must be an object.')

        replaces = entry.get("replaces") or []
        if isinstance(replaces, dict):
            replaces = list(replaces)
        if not isinstance(replaces, list) or not all(isinstance(r, str) for r in replaces):
            raise ConfigError(f'The "replaces" of package "{entry["name"]}" must be a list of names.')

        packages.append(Package(
            name=normalize_name(entry["name"]),
            extra=extra,
            replaces=tuple(normalize_name(r) for r in replaces),
            complete=not entry.get("alias", False),
        ))
    return packages
