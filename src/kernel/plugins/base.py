"""Plugin base class and capability tags for kernel extensions.

A package provides a plugin by pointing a logical name at a subclass of
KernelPlugin. The resolver never instantiates plugins; it only reads the
class-level attributes:

- capabilities          : set of tags the plugin provides (see below)
- package_dependencies  : logical names this plugin must load after,
                          honoured only when 'dependencies' is in
                          capabilities

Instances are created by the host when it loads the generated registry.
"""

from __future__ import annotations

from typing import Any, ClassVar

# Standard capabilities
BUNDLES = "bundles"            # Contributes bundles to the host kernel
CONFIG = "config"              # Ships configuration files
EXTENSIONS = "extensions"      # Extends other bundles' configuration
ROUTES = "routes"              # Registers routes
DEPENDENCIES = "dependencies"  # Declares package_dependencies

STANDARD_CAPABILITIES = frozenset({BUNDLES, CONFIG, EXTENSIONS, ROUTES, DEPENDENCIES})


def capabilities_of(implementation: Any) -> frozenset[str]:
    """Capability tags declared on a plugin class, factory or instance."""
    return frozenset(getattr(implementation, "capabilities", None) or ())


class KernelPlugin:
    """Base class kernel plugins should extend.

    Subclasses declare what they provide through class attributes and
    override only the hooks matching their capabilities.
    """

    capabilities: ClassVar[frozenset[str]] = frozenset()
    package_dependencies: ClassVar[tuple[str, ...]] = ()

    def get_bundles(self) -> list[str]:
        """Bundle identifiers to register with the host kernel ('bundles')."""
        return []

    def get_config_files(self) -> list[str]:
        """Configuration files to load, in order ('config')."""
        return []

    def get_extension_config(self, name: str, config: dict) -> dict:
        """Adjust the configuration of another extension ('extensions').

        Default implementation returns the configuration unchanged.
        """
        return config

    def get_routes(self) -> list[Any]:
        """Routes to register with the host ('routes')."""
        return []

    def __repr__(self) -> str:
        return f"<{type(self).__qualname__} capabilities={sorted(self.capabilities)}>"
