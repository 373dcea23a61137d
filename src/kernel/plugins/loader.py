"""Runtime view of the generated plugin registry.

The host calls PluginLoader.from_file() once at startup. Plugins are
instantiated in registry order through the implementation table, and the
loader then answers enumeration and capability queries without touching
the dependency graph again.

Disabling a plugin is a soft operation: it is hidden from enumeration but
kept in storage, so re-enabling it restores the original order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping

from kernel.plugins.base import capabilities_of
from kernel.plugins.errors import ArtifactError
from kernel.plugins.generator import ARTIFACT_VERSION, DEFAULT_ARTIFACT_PATH, PluginEntry
from kernel.plugins.implementations import ImplementationRegistry

logger = logging.getLogger(__name__)


def read_entries(path: str | Path = DEFAULT_ARTIFACT_PATH) -> list[PluginEntry]:
    """Read the entries of a generated registry without instantiating them.

    Raises:
        ArtifactError: If the file is missing, unreadable, or malformed.
    """
    path = Path(path)
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ArtifactError(f"Plugin registry not found: {path}. Run 'plugin-kernel dump'.") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ArtifactError(f"Cannot read plugin registry {path}: {e}") from e

    if not isinstance(document, dict) or document.get("version") != ARTIFACT_VERSION:
        raise ArtifactError(f"Unsupported plugin registry format in {path}")

    entries: list[PluginEntry] = []
    for item in document.get("plugins", []):
        try:
            entries.append(PluginEntry(
                name=item["name"],
                implementation=item["implementation"],
                capabilities=tuple(item.get("capabilities", ())),
            ))
        except (KeyError, TypeError, AttributeError) as e:
            raise ArtifactError(f"Malformed plugin entry in {path}: {item!r}") from e
    return entries


class PluginLoader:
    """Ordered plugin instances plus a runtime exclusion list."""

    def __init__(
        self,
        plugins: Mapping[str, Any],
        capabilities: Mapping[str, Iterable[str]] | None = None,
    ) -> None:
        self._plugins: dict[str, Any] = dict(plugins)
        self._capabilities: dict[str, frozenset[str]] = {}
        for name, plugin in self._plugins.items():
            if capabilities is not None and name in capabilities:
                self._capabilities[name] = frozenset(capabilities[name])
            else:
                self._capabilities[name] = capabilities_of(plugin)
        self._disabled: list[str] = []

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[PluginEntry],
        implementations: ImplementationRegistry | None = None,
    ) -> "PluginLoader":
        """Instantiate every entry in order.

        Raises:
            MissingImplementationError: If an implementation cannot be found.
        """
        implementations = implementations or ImplementationRegistry()
        plugins: dict[str, Any] = {}
        capabilities: dict[str, tuple[str, ...]] = {}
        for entry in entries:
            plugins[entry.name] = implementations.create(entry.implementation, entry.name)
            capabilities[entry.name] = entry.capabilities
        return cls(plugins, capabilities)

    @classmethod
    def from_file(
        cls,
        path: str | Path = DEFAULT_ARTIFACT_PATH,
        implementations: ImplementationRegistry | None = None,
    ) -> "PluginLoader":
        """Load the generated registry written by the last resolution run."""
        loader = cls.from_entries(read_entries(path), implementations)
        logger.info(f"Loaded {len(loader)} plugins from {path}")
        return loader

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_instances(self) -> dict[str, Any]:
        """All enabled plugin instances, in registry order."""
        disabled = set(self._disabled)
        return {
            name: plugin
            for name, plugin in self._plugins.items()
            if name not in disabled
        }

    def get_instances_of(self, capability: str, reverse_order: bool = False) -> dict[str, Any]:
        """Enabled plugins providing a capability, optionally in reverse order."""
        plugins = {
            name: plugin
            for name, plugin in self.get_instances().items()
            if capability in self._capabilities[name]
        }
        if reverse_order:
            plugins = dict(reversed(list(plugins.items())))
        return plugins

    def get(self, name: str) -> Any | None:
        """Get a plugin by logical name, disabled or not."""
        return self._plugins.get(name)

    def names(self) -> list[str]:
        """All stored logical names, including disabled ones."""
        return list(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[str]:
        return iter(self.get_instances())

    # ------------------------------------------------------------------
    # Exclusion list
    # ------------------------------------------------------------------

    def get_disabled_packages(self) -> list[str]:
        return list(self._disabled)

    def set_disabled_packages(self, packages: Iterable[str]) -> None:
        """Replace the exclusion list. Unknown names are accepted and ignored."""
        if isinstance(packages, str):
            packages = [packages]
        self._disabled = list(dict.fromkeys(packages))
