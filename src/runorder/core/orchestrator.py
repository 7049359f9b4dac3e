"""Orchestrator — public surface for registering and running tasks."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Self

from runorder.core.registry import TaskRegistry
from runorder.core.scheduler import Scheduler
from runorder.core.sequencer import compute_order
from runorder.core.task import CompletionMode, Task
from runorder.errors import CircularDependencyError, ConfigurationError, DependencyError

logger = logging.getLogger(__name__)

Notifier = Callable[[BaseException | None], Any]


class Orchestrator:
    """Run named tasks in dependency order, concurrently where possible.

    Example::

        orch = Orchestrator(verbose=True)
        orch.add("fetch", fetch)
        orch.add("build", ["fetch"], build, mode=CompletionMode.CALLBACK)
        orch.run("build", lambda err: print("done", err))

    Graph and task errors never escape ``run``; they are handed to the
    notifier, which fires exactly once per run. Only ``add`` raises, with
    ``ConfigurationError``.
    """

    def __init__(
        self,
        *,
        verbose: bool = False,
        callback: Notifier | None = None,
        seq: Sequence[str] | None = None,
    ) -> None:
        self.verbose = verbose
        self.tasks = TaskRegistry()
        self._notifier = callback
        self._scheduler = Scheduler(self.tasks, self.stop, self._say)
        self._scheduler.seq = list(seq or [])

    @property
    def running(self) -> bool:
        return self._scheduler.running

    @property
    def seq(self) -> list[str]:
        return list(self._scheduler.seq)

    def _say(self, line: str) -> None:
        if self.verbose:
            print(line)
        else:
            logger.debug(line)

    def add(
        self,
        name: str,
        dependencies: Iterable[str] | str | Callable[..., Any] | None = None,
        executor: Callable[..., Any] | None = None,
        *,
        mode: CompletionMode = CompletionMode.SYNC,
    ) -> Self:
        """Register ``executor`` under ``name``, replacing any earlier task.

        ``add(name, executor)`` is accepted as shorthand for a task without
        dependencies.
        """
        if executor is None and callable(dependencies):
            executor, dependencies = dependencies, None
        if not name or not isinstance(name, str):
            raise ConfigurationError("Task requires a name and a function to execute")
        if executor is None:
            raise ConfigurationError(f"Task {name!r} requires a function to execute")
        if not callable(executor):
            raise ConfigurationError(f"Executor for task {name!r} is not callable")
        if not isinstance(mode, CompletionMode):
            raise ConfigurationError(f"Task {name!r} has invalid completion mode {mode!r}")

        if dependencies is None:
            deps: tuple[str, ...] = ()
        elif isinstance(dependencies, str):
            deps = (dependencies,)
        else:
            deps = tuple(dependencies)  # type: ignore[arg-type]
        bad = [d for d in deps if not isinstance(d, str) or not d]
        if bad:
            raise ConfigurationError(f"Task {name!r} has invalid dependency names: {bad!r}")

        self.tasks.add(Task(name=name, executor=executor, dependencies=deps, mode=mode))
        return self

    def sequence(self, *names: str) -> list[str]:
        """Compute the run order for ``names`` without running anything."""
        return compute_order(self.tasks, names)

    def run(self, *args: Any) -> Self:
        """Start (or extend) a run of the named tasks.

        A trailing callable is taken as the notifier for this run. Calling
        ``run`` while a run is active puts the new names ahead of the pending
        sequence instead of starting a second run. With no names, every
        registered task runs.
        """
        names = list(args)
        if names and callable(names[-1]):
            self._notifier = names.pop()
        if self.running:
            names = names + self._scheduler.seq

        try:
            seq = compute_order(self.tasks, names)
        except (DependencyError, CircularDependencyError) as e:
            logger.debug("Sequencing failed: %s", e)
            self.stop(e)
            return self

        self._say(f"[seq: {','.join(seq)}]")
        self._scheduler.start(seq)
        return self

    async def run_async(self, *names: str) -> None:
        """Run ``names`` and wait for the run to end, raising its error."""
        loop = asyncio.get_running_loop()
        finished: asyncio.Future[BaseException | None] = loop.create_future()

        def _notify(err: BaseException | None) -> None:
            if not finished.done():
                finished.set_result(err)

        self.run(*names, _notify)
        err = await finished
        if err is not None:
            raise err

    def stop(self, error: BaseException | None = None, succeeded: bool = False) -> None:
        """End the current run and fire the notifier, at most once."""
        self._scheduler.running = False
        if error is not None:
            self._say("[orchestration failed]")
        elif succeeded:
            self._say("[orchestration succeeded]")
        else:
            self._say("[orchestration aborted]")

        notifier, self._notifier = self._notifier, None
        if notifier is not None:
            notifier(error)

    def reset(self) -> Self:
        self.stop(None)
        self.tasks.clear()
        self._scheduler.clear()
        self._notifier = None
        return self

    def __repr__(self) -> str:
        return f"Orchestrator(tasks={len(self.tasks)}, running={self.running})"
