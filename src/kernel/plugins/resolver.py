"""Topological ordering of plugins.

The order is a depth-first post-order over the declared edges: candidates
are visited in discovery order (with the primary plugin moved to the
front) and each plugin is emitted right after everything it depends on.
Given the same discovery order and edges the result never changes.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from kernel.plugins.errors import CycleError, DanglingDependencyError

logger = logging.getLogger(__name__)


def validate_graph(names: Sequence[str], graph: Mapping[str, Sequence[str]]) -> None:
    """Check that every dependency target is a declared plugin.

    Raises:
        DanglingDependencyError: For the first unknown target, in discovery order.
    """
    declared = set(names)
    for name in names:
        for dep in graph.get(name, ()):
            if dep not in declared:
                raise DanglingDependencyError(dep, name)


def resolve_order(
    names: Iterable[str],
    graph: Mapping[str, Sequence[str]],
    primary: str | None = None,
) -> list[str]:
    """Return the plugin names ordered so dependencies come first.

    Args:
        names: Declared logical names in discovery order.
        graph: Logical name -> names it must follow.
        primary: Plugin to visit first. It ends up at index 0 unless its own
            dependencies have to precede it.

    Raises:
        DanglingDependencyError: If an edge points at an undeclared name.
        CycleError: If the edges contain a cycle.
    """
    candidates = list(dict.fromkeys(names))
    validate_graph(candidates, graph)

    if primary is not None and primary in candidates:
        candidates.remove(primary)
        candidates.insert(0, primary)

    order: list[str] = []
    done: set[str] = set()

    for root in candidates:
        if root in done:
            continue

        # Iterative DFS; path mirrors the stack of dependency iterators
        path = [root]
        on_path = {root}
        stack = [iter(graph.get(root, ()))]

        while stack:
            for dep in stack[-1]:
                if dep in done:
                    continue
                if dep in on_path:
                    raise CycleError(path[path.index(dep):] + [dep])
                path.append(dep)
                on_path.add(dep)
                stack.append(iter(graph.get(dep, ())))
                break
            else:
                stack.pop()
                node = path.pop()
                on_path.discard(node)
                done.add(node)
                order.append(node)

    logger.debug(f"Resolved plugin order: {order}")
    return order
