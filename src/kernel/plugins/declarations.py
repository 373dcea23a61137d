"""Read plugin declarations from package metadata.

A package declares plugins under a single key of its 'extra' document:

    "kernel-plugin": "vendor_pkg.plugin:Plugin"

declares one plugin named after the package itself, while

    "kernel-plugin": {"vendor-pkg": "...:Plugin", "legacy-pkg": "...:Legacy"}

declares several. Every name other than the package's own must be one the
package replaces. Names are normalized like package names, so "Vendor_Pkg"
and "vendor-pkg" are the same plugin.
"""

from __future__ import annotations

from dataclasses import dataclass

from kernel.plugins.errors import ConfigError
from kernel.plugins.package import DEFAULT_METADATA_KEY, Package, normalize_name


@dataclass(frozen=True)
class PluginDeclaration:
    """A logical plugin name bound to an implementation by one package."""

    name: str
    implementation: str
    package: str


def extract_declarations(
    package: Package, key: str = DEFAULT_METADATA_KEY
) -> list[PluginDeclaration]:
    """Return the plugin declarations of a package, in declaration order.

    Raises:
        ConfigError: If the declaration has an invalid shape, or claims a
            logical name the package neither owns nor replaces.
    """
    if key not in package.extra:
        return []

    value = package.extra[key]

    if isinstance(value, str):
        return [PluginDeclaration(package.name, value, package.name)]

    if isinstance(value, dict):
        declarations = []
        for name, implementation in value.items():
            if not isinstance(name, str) or not isinstance(implementation, str):
                raise ConfigError(
                    f'Invalid value for "extra.{key}" in package "{package.name}": '
                    f"plugin names and classes must be strings."
                )
            normalized = normalize_name(name)
            if normalized != package.name and normalized not in package.replaces:
                raise ConfigError(
                    f'The package "{name}" is not replaced by "{package.name}".'
                )
            declarations.append(PluginDeclaration(normalized, implementation, package.name))
        return declarations

    raise ConfigError(f'Invalid value for "extra.{key}" in package "{package.name}".')
