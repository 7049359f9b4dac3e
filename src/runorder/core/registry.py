"""TaskRegistry — task definitions stored by name."""

from collections.abc import Iterator
from typing import Self

from runorder.core.task import Task


class TaskRegistry:
    """Mapping of task name to :class:`Task`.

    Names are unique; adding a task under an existing name replaces the
    earlier definition. Dependencies stay as raw names until sequencing.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def add(self, task: Task) -> Self:
        self._tasks[task.name] = task
        return self

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def __getitem__(self, name: str) -> Task:
        return self._tasks[name]

    def clear(self) -> None:
        self._tasks.clear()

    @property
    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskRegistry(tasks={self.names!r})"
