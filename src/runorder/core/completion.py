"""Completion protocol — turn every way a task can finish into one TaskOutcome."""

import asyncio
import concurrent.futures
import inspect
import logging
from collections.abc import Callable
from typing import Any

from runorder.core.task import CompletionMode, Signal, Task, TaskOutcome
from runorder.errors import SchedulerError, TaskError

logger = logging.getLogger(__name__)

Finish = Callable[[TaskOutcome], None]


def _task_error(name: str, error: Any) -> TaskError:
    if isinstance(error, TaskError):
        return error
    return TaskError(name, error)


def _as_handle(result: Any) -> Any:
    """Return something with ``add_done_callback`` for *result*, or None.

    Concurrent futures are bridged onto the running loop so their callbacks
    run on the control thread. They and bare awaitables need a running loop.
    """
    if isinstance(result, concurrent.futures.Future):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            result.cancel()
            raise SchedulerError("Concurrent future returned without a running event loop") from None
        return asyncio.wrap_future(result, loop=loop)
    if asyncio.isfuture(result):
        return result
    if inspect.isawaitable(result):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            raise SchedulerError("Awaitable returned without a running event loop") from None
        return asyncio.ensure_future(result, loop=loop)
    return None


class _Completion:
    """Delivers at most one outcome for a started task."""

    def __init__(self, task: Task, finish: Finish) -> None:
        self.task = task
        self._finish = finish
        self.settled = False
        self.deferred = False

    def settle(self, signal: Signal, error: BaseException | None = None) -> None:
        if self.settled:
            logger.debug("Ignoring %s from already finished task %s", signal.value, self.task.name)
            return
        self.settled = True
        self._finish(TaskOutcome(self.task.name, signal, error))

    def done(self, error: Any = None) -> None:
        """The callable handed to ``CALLBACK`` executors."""
        if self.deferred:
            logger.debug("%s: callback ignored, a returned future decides completion", self.task.name)
            return
        self.settle(Signal.CALLEDBACK, None if error is None else _task_error(self.task.name, error))

    def on_future_done(self, fut: Any) -> None:
        if fut.cancelled():
            self.settle(Signal.REJECTED, TaskError(self.task.name, "cancelled"))
            return
        exc = fut.exception()
        if exc is not None:
            self.settle(Signal.REJECTED, _task_error(self.task.name, exc))
        else:
            self.settle(Signal.RESOLVED)


def start_task(task: Task, finish: Finish) -> None:
    """Invoke ``task.executor`` and arrange for ``finish`` to be called once.

    ``SYNC`` tasks finish before this returns. ``CALLBACK`` tasks finish when
    their ``done`` callable is invoked, unless the executor also returned a
    future, in which case the future decides. ``FUTURE`` tasks finish when
    the returned future or awaitable settles.

    An exception raised by the executor is reported as a failed outcome,
    never propagated.
    """
    completion = _Completion(task, finish)
    args = (completion.done,) if task.mode is CompletionMode.CALLBACK else ()

    try:
        result = task.executor(*args)
    except Exception as e:
        completion.settle(Signal.RAISED, _task_error(task.name, e))
        return

    if task.mode is CompletionMode.SYNC:
        completion.settle(Signal.FINISHED)
        return

    try:
        handle = _as_handle(result)
    except SchedulerError as e:
        completion.settle(Signal.RAISED, e)
        return

    if handle is None:
        if task.mode is CompletionMode.FUTURE:
            completion.settle(
                Signal.RAISED,
                SchedulerError(f"Task {task.name!r} did not return a future or awaitable"),
            )
        return

    completion.deferred = True
    handle.add_done_callback(completion.on_future_done)
