"""Build the plugin dependency graph from declarations."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from kernel.plugins.declarations import PluginDeclaration
from kernel.plugins.errors import ConfigError

logger = logging.getLogger(__name__)

DependencyGraph = dict[str, list[str]]
DependencyLookup = Callable[[PluginDeclaration], Iterable[str]]


def no_dependencies(declaration: PluginDeclaration) -> list[str]:
    return []


def build_graph(
    declarations: Iterable[PluginDeclaration],
    dependency_lookup: DependencyLookup = no_dependencies,
) -> DependencyGraph:
    """Map each logical name to the names it must be ordered after.

    Keys keep discovery order; each dependency list keeps declaration order
    with repeats removed. Targets are not checked here, the resolver
    reports unknown names.

    Raises:
        ConfigError: If two packages declare the same logical name.
    """
    graph: DependencyGraph = {}
    owners: dict[str, str] = {}

    for declaration in declarations:
        name = declaration.name
        if name in owners:
            raise ConfigError(
                f'The package "{name}" cannot be registered twice '
                f'(declared by "{owners[name]}" and "{declaration.package}").'
            )
        owners[name] = declaration.package

        deps: list[str] = []
        for dep in dependency_lookup(declaration) or ():
            if dep not in deps:
                deps.append(dep)
        graph[name] = deps

        if deps:
            logger.debug(f"Plugin {name} depends on {deps}")

    return graph
