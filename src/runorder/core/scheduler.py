"""Scheduler — the run loop that starts every task whose dependencies are done."""

import logging
from collections.abc import Callable

from runorder.core.completion import start_task
from runorder.core.registry import TaskRegistry
from runorder.core.task import Signal, Task, TaskOutcome, TaskStatus
from runorder.errors import DependencyError

logger = logging.getLogger(__name__)

Stop = Callable[..., None]
Say = Callable[[str], None]


class Scheduler:
    """Drive one run over ``seq`` at a time.

    Each pass scans the sequence in order and starts every task that has not
    started yet and whose dependencies are all ``DONE``. Completions mark the
    task done and request another pass. Requests are coalesced and drained by
    a single dispatcher loop, so a long chain of synchronous tasks runs in a
    flat loop instead of nested calls.

    ``stop`` is the controller's stop; the scheduler calls it with the error
    that aborted the run, or with ``succeeded=True`` once everything is done.
    """

    def __init__(self, registry: TaskRegistry, stop: Stop, say: Say) -> None:
        self.registry = registry
        self.seq: list[str] = []
        self.running = False
        self._stop = stop
        self._say = say
        self._states: dict[str, TaskStatus] = {}
        self._generation = 0
        self._pass_pending = False
        self._dispatching = False

    def status(self, name: str) -> TaskStatus:
        return self._states.get(name, TaskStatus.NOT_STARTED)

    def start(self, seq: list[str]) -> None:
        """Install ``seq`` and schedule a pass.

        A scheduler that is not running starts a fresh run: per-task state is
        cleared and completions from earlier runs are ignored from now on.
        A running scheduler keeps its state and picks up the new sequence.
        """
        if not self.running:
            self._generation += 1
            self._states = {}
            self._pass_pending = False
            self.running = True
        self.seq = seq
        self.request_pass()

    def clear(self) -> None:
        self._generation += 1
        self._states = {}
        self._pass_pending = False
        self.seq = []

    def all_done(self) -> bool:
        return all(self.status(name) is TaskStatus.DONE for name in self.seq)

    def request_pass(self) -> None:
        self._pass_pending = True
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pass_pending and self.running:
                self._pass_pending = False
                self._pass()
        finally:
            self._dispatching = False

    def _pass(self) -> None:
        generation = self._generation
        for name in list(self.seq):
            task = self.registry.get(name)
            if task is None:
                self._stop(DependencyError(name))
                return
            if self.status(name) is TaskStatus.NOT_STARTED and self._ready(task):
                self._launch(task)
            if not self._active(generation):
                return
        if self.all_done():
            self._stop(None, succeeded=True)

    def _active(self, generation: int) -> bool:
        """False once the run this pass belongs to was stopped or replaced."""
        return self.running and self._generation == generation

    def _ready(self, task: Task) -> bool:
        for dep in task.dependencies:
            if dep not in self.registry:
                self._stop(DependencyError(dep, task.name))
                return False
            if self.status(dep) is not TaskStatus.DONE:
                return False
        return True

    def _launch(self, task: Task) -> None:
        generation = self._generation
        self._say(f"[{task.name} started]")
        self._states[task.name] = TaskStatus.RUNNING
        start_task(task, lambda outcome: self._on_complete(outcome, generation))

    def _on_complete(self, outcome: TaskOutcome, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Dropping %s from %s: its run is over", outcome.signal.value, outcome.name)
            return
        if self.status(outcome.name) is TaskStatus.DONE:
            return
        self._states[outcome.name] = TaskStatus.DONE
        if self.running and outcome.signal is not Signal.RAISED:
            self._say(f"[{outcome.name} {outcome.signal.value}]")

        if not outcome.ok:
            if self.running:
                self._stop(outcome.error)
            return
        self.request_pass()
