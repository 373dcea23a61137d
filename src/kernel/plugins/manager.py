"""Plugin dumper: discovery, dependency resolution, and registry generation.

Runs the whole pipeline once per package-manager lifecycle event:
  packages -> declarations -> graph -> order -> (+ app plugin) -> artifact

Any error aborts the run before the artifact is touched, so the host keeps
running on the last registry that was generated successfully.
"""

from __future__ import annotations

import logging
from typing import Sequence

from kernel.plugins.declarations import PluginDeclaration, extract_declarations
from kernel.plugins.errors import ConfigError
from kernel.plugins.generator import PluginEntry, RegistryGenerator
from kernel.plugins.graph import build_graph
from kernel.plugins.implementations import ImplementationRegistry
from kernel.plugins.package import (
    DEFAULT_METADATA_KEY,
    PackageRepository,
    complete_packages,
    normalize_name,
)
from kernel.plugins.resolver import resolve_order

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_PACKAGE = "plugin-kernel"
DEFAULT_APP_PLUGIN_NAME = "app"
DEFAULT_APP_PLUGIN_CANDIDATES = ("app.plugin:Plugin", "app_kernel:AppKernel")


class PluginDumper:
    """Resolves the plugin order of a package repository and writes it out."""

    def __init__(
        self,
        implementations: ImplementationRegistry | None = None,
        generator: RegistryGenerator | None = None,
        metadata_key: str = DEFAULT_METADATA_KEY,
        primary_package: str | None = DEFAULT_PRIMARY_PACKAGE,
        app_plugin_name: str = DEFAULT_APP_PLUGIN_NAME,
        app_plugin_candidates: Sequence[str] = DEFAULT_APP_PLUGIN_CANDIDATES,
    ) -> None:
        self.implementations = implementations or ImplementationRegistry()
        self.generator = generator or RegistryGenerator()
        self.metadata_key = metadata_key
        self.primary_package = normalize_name(primary_package) if primary_package else None
        self.app_plugin_name = normalize_name(app_plugin_name)
        self.app_plugin_candidates = list(app_plugin_candidates)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def run(self, repository: PackageRepository) -> list[PluginEntry]:
        """Resolve the plugin order and write the registry artifact.

        Raises:
            ConfigError, DanglingDependencyError, CycleError,
            MissingImplementationError, ImplementationImportError: Nothing is
            written in that case.
        """
        logger.info("Generating plugin registry...")
        entries = self.plan(repository)
        self.generator.dump(entries)
        logger.info(f"...done generating plugin registry ({len(entries)} plugins)")
        return entries

    def plan(self, repository: PackageRepository) -> list[PluginEntry]:
        """Resolve the plugin order without writing anything."""
        declarations = self.collect(repository)
        entries = self.order(declarations)

        app_entry = self.app_plugin_entry()
        if app_entry is not None:
            if any(entry.name == app_entry.name for entry in entries):
                raise ConfigError(
                    f'The package "{app_entry.name}" cannot be registered twice '
                    f"(it is reserved for the application plugin)."
                )
            entries.append(app_entry)
        return entries

    def collect(self, repository: PackageRepository) -> list[PluginDeclaration]:
        """Read declarations from every complete package, in repository order.

        Raises:
            ConfigError: On the first invalid declaration.
            MissingImplementationError: If a declared class cannot be loaded.
            ImplementationImportError: If its module fails to import.
        """
        declarations: list[PluginDeclaration] = []
        for package in complete_packages(repository):
            for declaration in extract_declarations(package, self.metadata_key):
                self.implementations.resolve(declaration.implementation, declaration.name)
                logger.debug(f" - Added plugin for {declaration.name}")
                declarations.append(declaration)
        return declarations

    def order(self, declarations: Sequence[PluginDeclaration]) -> list[PluginEntry]:
        """Order declarations by their dependencies, primary package first."""
        graph = build_graph(
            declarations,
            lambda d: self.implementations.dependencies(d.implementation),
        )
        by_name = {d.name: d for d in declarations}
        names = resolve_order(by_name, graph, self.primary_package)
        return [self._entry(name, by_name[name].implementation) for name in names]

    def app_plugin_entry(self) -> PluginEntry | None:
        """Entry for the application plugin, if the host defines one."""
        for identifier in self.app_plugin_candidates:
            if self.implementations.exists(identifier):
                logger.debug(f" - Added application plugin {identifier}")
                return self._entry(self.app_plugin_name, identifier)
        return None

    def _entry(self, name: str, implementation: str) -> PluginEntry:
        capabilities = self.implementations.capabilities(implementation)
        return PluginEntry(name, implementation, tuple(sorted(capabilities)))
