"""Task dataclass and the enums describing how a task runs and finishes."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CompletionMode(Enum):
    """How an executor signals that it has finished.

    ``SYNC`` executors take no arguments and are done when they return.
    ``CALLBACK`` executors receive a single ``done(error=None)`` callable.
    ``FUTURE`` executors take no arguments and return a future or awaitable.
    """

    SYNC = "sync"
    CALLBACK = "callback"
    FUTURE = "future"


class TaskStatus(Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    DONE = "done"


class Signal(Enum):
    """The way a started task reported completion."""

    FINISHED = "finished"
    CALLEDBACK = "calledback"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    RAISED = "raised"


@dataclass(frozen=True)
class Task:
    name: str
    executor: Callable[..., Any]
    dependencies: tuple[str, ...] = ()
    mode: CompletionMode = CompletionMode.SYNC


@dataclass
class TaskOutcome:
    name: str
    signal: Signal
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
