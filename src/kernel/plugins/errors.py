"""Errors raised while resolving and loading kernel plugins.

Every error is fatal to the run that raised it. Nothing is retried and no
artifact is written; the previously generated registry stays in place.
"""

from __future__ import annotations


class KernelPluginError(Exception):
    """Base class for all plugin resolution errors."""


class ConfigError(KernelPluginError):
    """A package declaration is malformed or conflicts with another one."""


class DanglingDependencyError(KernelPluginError):
    """A plugin depends on a logical name that no package declares."""

    def __init__(self, missing: str, dependent: str) -> None:
        self.missing = missing
        self.dependent = dependent
        super().__init__(
            f'The plugin "{dependent}" depends on "{missing}", '
            f"which is not provided by any installed package."
        )


class CycleError(KernelPluginError):
    """The declared dependencies do not form a DAG.

    ``cycle`` holds the full loop with the first name repeated at the end,
    e.g. ``["a", "b", "a"]``.
    """

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Circular dependency detected among plugins: "
            + " -> ".join(self.cycle)
        )

    @property
    def participants(self) -> list[str]:
        """Names in the cycle, each listed once."""
        return self.cycle[:-1] if len(self.cycle) > 1 else list(self.cycle)


class MissingImplementationError(KernelPluginError):
    """An implementation identifier cannot be resolved to a loadable type."""

    def __init__(self, identifier: str, name: str | None = None) -> None:
        self.identifier = identifier
        self.name = name
        if name:
            message = f'The plugin class "{identifier}" for "{name}" was not found.'
        else:
            message = f'The plugin class "{identifier}" was not found.'
        super().__init__(message)


class ImplementationImportError(KernelPluginError):
    """An implementation module exists but raised ImportError while loading."""

    def __init__(self, identifier: str, error: ImportError, name: str | None = None) -> None:
        self.identifier = identifier
        self.error = error
        self.name = name
        target = f'"{identifier}" for "{name}"' if name else f'"{identifier}"'
        super().__init__(f"The plugin class {target} could not be imported: {error}")


class ArtifactError(KernelPluginError):
    """The generated plugin registry cannot be read."""
