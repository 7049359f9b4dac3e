"""Task file parser — read shell tasks and their dependencies from YAML.

A task file maps task names to commands::

    defaults:
      timeout: 300
    tasks:
      fetch: curl -sO https://example.com/data.csv
      build:
        run: make all
        deps: [fetch]
        cwd: src
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from runorder.core.orchestrator import Orchestrator
from runorder.core.task import CompletionMode
from runorder.errors import ConfigurationError
from runorder.shell import DEFAULT_TIMEOUT, shell_task


@dataclass
class TaskDef:
    """A shell task as declared in a task file."""

    name: str
    command: str
    deps: list[str] = field(default_factory=list)
    timeout: float = DEFAULT_TIMEOUT
    cwd: str | None = None


def _as_list(value: Any, name: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(v) for v in value]
    raise ConfigurationError(f"Task {name!r}: 'deps' must be a string or a list")


def _parse_task(name: str, body: Any, defaults: dict[str, Any]) -> TaskDef:
    if isinstance(body, str):
        body = {"run": body}
    if not isinstance(body, dict):
        raise ConfigurationError(f"Task {name!r}: expected a command or a mapping")

    command = body.get("run")
    if not command or not isinstance(command, str):
        raise ConfigurationError(f"Task {name!r}: missing 'run' command")

    unknown = set(body) - {"run", "deps", "timeout", "cwd"}
    if unknown:
        raise ConfigurationError(f"Task {name!r}: unknown keys {sorted(unknown)}")

    timeout = body.get("timeout", defaults.get("timeout", DEFAULT_TIMEOUT))
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Task {name!r}: 'timeout' must be a number") from None

    return TaskDef(
        name=name,
        command=command,
        deps=_as_list(body.get("deps"), name),
        timeout=timeout,
        cwd=body.get("cwd", defaults.get("cwd")),
    )


def parse_taskfile(text: str) -> list[TaskDef]:
    """Parse task file YAML into task definitions, in file order."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Task file is not valid YAML: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("tasks"), dict):
        raise ConfigurationError("Task file needs a top-level 'tasks' mapping")

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        raise ConfigurationError("'defaults' must be a mapping")

    return [_parse_task(str(name), body, defaults) for name, body in data["tasks"].items()]


def load_taskfile(path: str | Path) -> list[TaskDef]:
    return parse_taskfile(Path(path).read_text())


def register(orchestrator: Orchestrator, defs: list[TaskDef]) -> Orchestrator:
    """Add each definition to ``orchestrator`` as a future-driven shell task."""
    for d in defs:
        orchestrator.add(
            d.name,
            d.deps,
            shell_task(d.command, timeout=d.timeout, cwd=d.cwd),
            mode=CompletionMode.FUTURE,
        )
    return orchestrator
