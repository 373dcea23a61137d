"""Registration table from implementation identifiers to plugin factories.

Identifiers use the entry point syntax 'package.module:QualName'. A factory
is any zero-argument callable returning a plugin; usually the plugin class
itself. Factories can be registered explicitly, otherwise they are imported
on first use and cached.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable

from kernel.plugins.base import DEPENDENCIES, capabilities_of
from kernel.plugins.errors import ImplementationImportError, MissingImplementationError
from kernel.plugins.package import normalize_name

logger = logging.getLogger(__name__)

Factory = Callable[[], Any]


def import_object(identifier: str) -> Any:
    """Import 'module:Qual.Name' (or dotted 'module.Name') and return the object.

    Raises:
        MissingImplementationError: If the module or attribute is missing.
        ImplementationImportError: If the module exists but fails to import.
    """
    if ":" in identifier:
        module_name, _, qualname = identifier.partition(":")
    else:
        module_name, _, qualname = identifier.rpartition(".")

    if not module_name or not qualname:
        raise MissingImplementationError(identifier)

    try:
        obj = importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if not _is_module_or_parent(e.name, module_name):
            raise ImplementationImportError(identifier, e) from e
        logger.debug(f"Cannot import {module_name} for {identifier}: {e}")
        raise MissingImplementationError(identifier) from e
    except ImportError as e:
        raise ImplementationImportError(identifier, e) from e

    for attr in qualname.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise MissingImplementationError(identifier) from e
    return obj


def _is_module_or_parent(missing: str | None, module_name: str) -> bool:
    return missing is not None and (
        module_name == missing or module_name.startswith(missing + ".")
    )


class ImplementationRegistry:
    """Maps implementation identifiers to zero-argument factories."""

    def __init__(self, autoload: bool = True) -> None:
        self._factories: dict[str, Factory] = {}
        self.autoload = autoload

    def register(self, identifier: str, factory: Factory) -> None:
        """Register a factory, replacing any previous one for the identifier."""
        if not callable(factory):
            raise TypeError(f"Factory for '{identifier}' is not callable")
        self._factories[identifier] = factory

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._factories

    def exists(self, identifier: str) -> bool:
        """True if the identifier resolves to a factory."""
        try:
            self.resolve(identifier)
        except MissingImplementationError:
            return False
        return True

    def resolve(self, identifier: str, name: str | None = None) -> Factory:
        """Return the factory for an identifier, importing it if needed.

        Raises:
            MissingImplementationError: If no factory can be found.
            ImplementationImportError: If the module fails to import.
        """
        factory = self._factories.get(identifier)
        if factory is not None:
            return factory
        if not self.autoload:
            raise MissingImplementationError(identifier, name)

        try:
            factory = import_object(identifier)
        except MissingImplementationError as e:
            raise MissingImplementationError(identifier, name) from e
        except ImplementationImportError as e:
            raise ImplementationImportError(identifier, e.error, name) from e.error
        if not callable(factory):
            raise MissingImplementationError(identifier, name)

        self._factories[identifier] = factory
        return factory

    def capabilities(self, identifier: str) -> frozenset[str]:
        """Capability tags declared by the implementation."""
        return capabilities_of(self.resolve(identifier))

    def dependencies(self, identifier: str) -> list[str]:
        """Logical names the implementation must load after.

        Implementations without the 'dependencies' capability have none.
        Names are normalized like package names.
        """
        factory = self.resolve(identifier)
        if DEPENDENCIES not in capabilities_of(factory):
            return []
        deps = getattr(factory, "package_dependencies", None) or ()
        if isinstance(deps, str):
            deps = (deps,)
        return [normalize_name(dep) for dep in deps]

    def create(self, identifier: str, name: str | None = None) -> Any:
        """Instantiate the implementation through its factory."""
        return self.resolve(identifier, name)()
