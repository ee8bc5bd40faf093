"""CodeForge exceptions.

Every exception carries a stable ``code`` plus keyword context (step id,
worker name, ...) that is set as attributes and reported by ``to_dict``.
"""

from __future__ import annotations

from typing import Any


class CodeForgeError(Exception):
    """Root of the CodeForge exception tree."""

    code = "CODEFORGE_ERROR"

    # Set by the engine on run-level failures: the RunResult so far
    run_result: Any = None

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context
        for key, value in context.items():
            setattr(self, key, value)

    def to_dict(self) -> dict[str, Any]:
        data = {"error": self.code, "message": self.message}
        data.update(
            (key, value if isinstance(value, (str, int, list, type(None))) else str(value))
            for key, value in self.context.items()
        )
        return data


class NotFoundError(CodeForgeError):
    """A registry lookup missed."""

    code = "NOT_FOUND"


class WorkflowNotFoundError(NotFoundError):
    code = "WORKFLOW_NOT_FOUND"

    def __init__(self, workflow_id: str):
        super().__init__(f"Workflow {workflow_id} not found", workflow_id=workflow_id)


class WorkerNotFoundError(NotFoundError):
    code = "WORKER_NOT_FOUND"

    def __init__(self, worker_name: str):
        super().__init__(f"Worker {worker_name} not found", worker_name=worker_name)


class InvalidDefinitionError(CodeForgeError):
    """A workflow definition breaks one or more rules; see ``errors``."""

    code = "INVALID_DEFINITION"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message, errors=list(errors or []))


class WorkerUnavailableError(CodeForgeError):
    """No registered worker can take the task."""

    code = "WORKER_UNAVAILABLE"

    def __init__(self, message: str, task_type: str | None = None, worker: str | None = None):
        super().__init__(message, task_type=task_type, worker=worker)


class WorkflowError(CodeForgeError):
    """A run could not continue."""

    code = "WORKFLOW_ERROR"


class StepExecutionError(WorkflowError):
    """A step's condition or next selector raised."""

    code = "STEP_EXECUTION"

    def __init__(self, message: str, step: str | None = None, cause: Exception | None = None):
        super().__init__(message, step=step, cause=cause)


class InvalidTransitionError(WorkflowError):
    """A next-step id names no step in the workflow."""

    code = "INVALID_TRANSITION"

    def __init__(self, message: str, step: str | None = None, target: str | None = None):
        super().__init__(message, step=step, target=target)


class HookError(CodeForgeError):
    """A git commit or push after the run failed."""

    code = "HOOK_FAILED"
