"""Task dispatcher: routes a task to the worker registered for its type."""

from __future__ import annotations

import logging
import time

from codeforge.errors import WorkerNotFoundError, WorkerUnavailableError

from .base import Context, Result, Task, Worker
from .registry import WorkerRegistry

logger = logging.getLogger(__name__)

# Task type -> worker registry key. The tag is the lookup key; there is no
# search across candidates.
TASK_TYPE_TO_WORKER: dict[str, str] = {
    "code-generation": "codeGeneration",
    "code-review": "codeReview",
    "error-fixing": "errorFixing",
    "refactoring": "refactoring",
    "testing": "testing",
    "langgraph": "langgraph",
}

TASK_TYPES = frozenset(TASK_TYPE_TO_WORKER)


class TaskDispatcher:
    """Selects the worker for a task and invokes it.

    Dispatch never raises for an unknown type, a missing worker, or a worker
    that blows up: each becomes a failed Result so the engine's control
    flow stays data driven. No retries are performed here.
    """

    def __init__(
        self,
        registry: WorkerRegistry,
        routes: dict[str, str] | None = None,
    ):
        """Initialize dispatcher.

        Args:
            registry: Registry to resolve workers from
            routes: Optional override of the task type -> worker table
        """
        self.registry = registry
        self.routes = dict(routes) if routes is not None else dict(TASK_TYPE_TO_WORKER)

    def resolve(self, task: Task) -> Worker:
        """Return the worker that handles ``task``.

        Raises:
            WorkerUnavailableError: If the type is unknown or its worker is not registered
        """
        worker_name = self.routes.get(task.type)
        if worker_name is None:
            raise WorkerUnavailableError(f"Unknown task type: {task.type}", task_type=task.type)
        try:
            return self.registry.get(worker_name)
        except WorkerNotFoundError:
            raise WorkerUnavailableError(
                f"No worker registered for task type {task.type} (expected {worker_name})",
                task_type=task.type,
                worker=worker_name,
            ) from None

    def dispatch(self, task: Task, context: Context) -> Result:
        """Execute ``task`` on its worker and return the worker's Result."""
        try:
            worker = self.resolve(task)
        except WorkerUnavailableError as e:
            logger.warning("Dispatch of task %s failed: %s", task.id, e.message)
            return _unavailable(e)

        start = time.time()
        try:
            result = worker.execute(task, context)
        except Exception as e:
            logger.exception("Worker %s raised while executing task %s", worker.name, task.id)
            return _worker_exception(worker, e)

        _log_handled(task, worker, start, result)
        return result

    async def dispatch_async(self, task: Task, context: Context) -> Result:
        """Async version of dispatch()."""
        try:
            worker = self.resolve(task)
        except WorkerUnavailableError as e:
            logger.warning("Dispatch of task %s failed: %s", task.id, e.message)
            return _unavailable(e)

        start = time.time()
        try:
            result = await worker.execute_async(task, context)
        except Exception as e:
            logger.exception("Worker %s raised while executing task %s", worker.name, task.id)
            return _worker_exception(worker, e)

        _log_handled(task, worker, start, result)
        return result

    def orchestrate(self, tasks: list[Task], context: Context) -> list[Result]:
        """Dispatch tasks in order, recording each result in the context."""
        results = []
        for task in tasks:
            result = self.dispatch(task, context)
            context.record(task.id, result)
            results.append(result)
        return results


def _log_handled(task: Task, worker: Worker, start: float, result: Result) -> None:
    logger.debug(
        "Task %s handled by %s in %.0fms (success=%s)",
        task.id,
        worker.name,
        (time.time() - start) * 1000,
        result.success,
    )


def _unavailable(error: WorkerUnavailableError) -> Result:
    return Result.failure(
        error.message,
        error_code=error.code,
        task_type=error.task_type,
        worker=error.worker,
    )


def _worker_exception(worker: Worker, error: Exception) -> Result:
    return Result.failure(
        f"{worker.name} failed: {error}",
        error_code="WORKER_EXCEPTION",
        worker=worker.name,
        exception_type=type(error).__name__,
    )
