"""Core task, result and context types shared by workers and the engine."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Task:
    """A unit of work dispatched to the worker matching its type."""

    id: str
    type: str
    description: str = ""
    input: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Result:
    """Outcome of executing one task. Immutable once produced."""

    success: bool
    output: Any = None
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, output: Any = None, **metadata: Any) -> Result:
        return cls(success=True, output=output, metadata=metadata)

    @classmethod
    def failure(cls, error: str, output: Any = None, **metadata: Any) -> Result:
        return cls(success=False, output=output, error=error, metadata=metadata)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "output": self.output,
            "error": self.error,
            "metadata": self.metadata,
        }


@dataclass
class CodebaseSnapshot:
    """Read-only view of the codebase a run operates on."""

    root_dir: str
    files: dict[str, str] = field(default_factory=dict)
    structures: dict[str, Any] | None = None


@dataclass
class Context:
    """Run-scoped state threaded through every step of one workflow run.

    Owned by exactly one engine run. ``results`` holds the latest Result of
    each executed step, keyed by step id.
    """

    codebase: CodebaseSnapshot
    results: dict[str, Result] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)

    def record(self, step_id: str, result: Result) -> None:
        self.results[step_id] = result

    def result_of(self, step_id: str) -> Result | None:
        return self.results.get(step_id)


class Worker(ABC):
    """A capability-tagged executor that turns a Task and Context into a Result.

    Workers are registered once at startup and hold no per-run state.
    """

    name: str = "worker"
    description: str = ""
    capabilities: tuple[str, ...] = ()

    @abstractmethod
    def execute(self, task: Task, context: Context) -> Result:
        """Execute a task.

        Args:
            task: Task to execute
            context: Context of the current run

        Returns:
            Result of the task
        """

    async def execute_async(self, task: Task, context: Context) -> Result:
        """Async execution - default wraps sync version in executor.

        Override this method for native async implementations.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.execute, task, context)
