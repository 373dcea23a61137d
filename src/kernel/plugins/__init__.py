"""Kernel Plugin System.

Discovers plugin declarations in installed packages, orders them by their
declared dependencies, and writes the result to a registry artifact the
host loads at startup without resolving anything again.
"""

from kernel.plugins.base import KernelPlugin
from kernel.plugins.declarations import PluginDeclaration, extract_declarations
from kernel.plugins.errors import (
    ArtifactError,
    ConfigError,
    CycleError,
    DanglingDependencyError,
    ImplementationImportError,
    KernelPluginError,
    MissingImplementationError,
)
from kernel.plugins.generator import PluginEntry, RegistryGenerator
from kernel.plugins.graph import build_graph
from kernel.plugins.implementations import ImplementationRegistry
from kernel.plugins.loader import PluginLoader
from kernel.plugins.manager import PluginDumper
from kernel.plugins.package import (
    InstalledPackageRepository,
    ManifestPackageRepository,
    Package,
)
from kernel.plugins.resolver import resolve_order

__all__ = [
    "KernelPlugin",
    "PluginDeclaration",
    "extract_declarations",
    "ArtifactError",
    "ConfigError",
    "CycleError",
    "DanglingDependencyError",
    "ImplementationImportError",
    "KernelPluginError",
    "MissingImplementationError",
    "PluginEntry",
    "RegistryGenerator",
    "build_graph",
    "ImplementationRegistry",
    "PluginLoader",
    "PluginDumper",
    "InstalledPackageRepository",
    "ManifestPackageRepository",
    "Package",
    "resolve_order",
]
