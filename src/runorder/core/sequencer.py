"""Sequencer — depth-first linearization of the dependency graph."""

from collections.abc import Iterable

from runorder.core.registry import TaskRegistry
from runorder.errors import CircularDependencyError, DependencyError


def compute_order(registry: TaskRegistry, names: Iterable[str] = ()) -> list[str]:
    """Return the requested tasks and their transitive dependencies in run order.

    Dependencies always come before their dependents and every name appears
    exactly once. With no requested names, every registered task is ordered
    in registration order.

    Raises ``DependencyError`` for an unknown task and
    ``CircularDependencyError`` when the expansion revisits a name that is
    still on the current path.
    """
    requested = list(names) or registry.names
    order: list[str] = []
    placed: set[str] = set()
    path: list[str] = []
    expanding: set[str] = set()

    def visit(name: str, referrer: str | None) -> None:
        if name in expanding:
            start = path.index(name)
            raise CircularDependencyError([*path[start:], name])
        if name in placed:
            return
        task = registry.get(name)
        if task is None:
            raise DependencyError(name, referrer)

        expanding.add(name)
        path.append(name)
        for dep in task.dependencies:
            visit(dep, name)
        path.pop()
        expanding.discard(name)

        placed.add(name)
        order.append(name)

    for name in requested:
        visit(name, None)
    return order
