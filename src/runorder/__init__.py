"""Dependency-driven task orchestration."""

from runorder.core.orchestrator import Orchestrator
from runorder.core.registry import TaskRegistry
from runorder.core.sequencer import compute_order
from runorder.core.task import CompletionMode, Signal, Task, TaskOutcome, TaskStatus
from runorder.errors import (
    CircularDependencyError,
    ConfigurationError,
    DependencyError,
    OrchestratorError,
    SchedulerError,
    TaskError,
)

__all__ = [
    "CircularDependencyError",
    "CompletionMode",
    "ConfigurationError",
    "DependencyError",
    "Orchestrator",
    "OrchestratorError",
    "SchedulerError",
    "Signal",
    "Task",
    "TaskError",
    "TaskOutcome",
    "TaskRegistry",
    "TaskStatus",
    "compute_order",
]
