"""Exception taxonomy for the orchestrator."""

from typing import Any


class OrchestratorError(Exception):
    """Base class for every error raised or delivered by runorder."""


class ConfigurationError(OrchestratorError, ValueError):
    """Raised synchronously when a task is defined incorrectly."""


class DependencyError(OrchestratorError):
    """A task references a dependency that is not registered."""

    def __init__(self, name: str, referrer: str | None = None) -> None:
        self.name = name
        self.referrer = referrer
        if referrer is None:
            msg = f"Task {name!r} is not defined"
        else:
            msg = f"Task {referrer!r} depends on {name!r}, which is not defined"
        super().__init__(msg)


class CircularDependencyError(OrchestratorError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]) -> None:
        self.cycle = cycle
        super().__init__(f"Circular dependency: {' -> '.join(cycle)}")


class TaskError(OrchestratorError):
    """A task raised, called back with an error, or its future was rejected."""

    def __init__(self, task: str, cause: Any = None) -> None:
        self.task = task
        self.cause = cause
        detail = f": {cause}" if cause is not None and str(cause) else ""
        super().__init__(f"Task {task!r} failed{detail}")
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class SchedulerError(OrchestratorError):
    """Internal fault of the scheduler rather than of a task."""
