"""Dependency graph utilities.

Scripts such as build run across the workspace in dependency order, so a
package's internal dependencies are always handled before the package.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping

from .models import PackageInfo


def find_dependents(packages: Mapping[str, PackageInfo], name: str) -> list[str]:
    """Names of the packages that depend directly on name, sorted."""
    return sorted(n for n, info in packages.items() if name in info.deps)


def topo_sort(packages: Mapping[str, PackageInfo]) -> list[str]:
    """Order packages so that every package follows its internal dependencies.

    Packages with no dependencies start in alphabetical order. Packages
    released by the same dependency join the queue alphabetically, behind
    everything already waiting, so the order is stable between runs but not
    globally alphabetical. Dependencies outside packages are ignored.

    Raises:
        RuntimeError: If a dependency cycle is detected.

    Example:
        If A depends on B, and B depends on C:
        topo_sort({A, B, C}) → [C, B, A]
    """
    pending = {
        n: {d for d in info.deps if d in packages} for n, info in packages.items()
    }
    ready = deque(sorted(n for n, deps in pending.items() if not deps))
    order: list[str] = []

    while ready:
        node = ready.popleft()
        order.append(node)
        for dependent in find_dependents(packages, node):
            waiting = pending[dependent]
            waiting.discard(node)
            if not waiting and dependent not in order and dependent not in ready:
                ready.append(dependent)

    if len(order) != len(packages):
        remaining = sorted(set(packages) - set(order))
        raise RuntimeError(f"Dependency cycle detected involving: {remaining}")

    return order
