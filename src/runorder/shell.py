"""Shell tasks — run a command line via asyncio subprocess."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120


@dataclass
class ShellResult:
    command: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def passed(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout + stderr combined."""
        return (self.stdout + "\n" + self.stderr).strip()


class ShellCommandError(Exception):
    """A shell command exited non-zero or timed out."""

    def __init__(self, message: str, result: ShellResult) -> None:
        super().__init__(message)
        self.result = result

    @property
    def returncode(self) -> int:
        return self.result.returncode


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        proc.kill()
    await proc.wait()


async def run_command(command: str, *, timeout: float = DEFAULT_TIMEOUT, cwd: str | None = None) -> ShellResult:
    """Run ``command`` and return its captured output.

    Raises ``ShellCommandError`` on a non-zero exit or when ``timeout``
    seconds pass; on timeout the process is killed and ``returncode`` is -1.
    Cancelling the call kills the process too.
    """
    logger.debug("$ %s", command)
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.CancelledError:
        await _kill(proc)
        raise
    except TimeoutError:
        await _kill(proc)
        result = ShellResult(command=command, returncode=-1, stdout="", stderr="")
        raise ShellCommandError(f"Command timed out after {timeout}s: {command}", result) from None

    result = ShellResult(
        command=command,
        returncode=proc.returncode or 0,
        stdout=stdout.decode(),
        stderr=stderr.decode(),
    )
    if result.output:
        logger.info("%s", result.output)
    if not result.passed:
        raise ShellCommandError(f"Command exited with code {result.returncode}: {command}", result)
    return result


def shell_task(
    command: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    cwd: str | None = None,
) -> Callable[[], Coroutine[Any, Any, ShellResult]]:
    """Build a ``CompletionMode.FUTURE`` executor that runs ``command``."""

    def _executor() -> Coroutine[Any, Any, ShellResult]:
        return run_command(command, timeout=timeout, cwd=cwd)

    return _executor
