"""Dataclasses and enums for workflow run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from codeforge.workers.base import Result


class RunState(Enum):
    """States of the engine's per-run state machine."""

    READY = "ready"
    STEP_PENDING = "step_pending"
    STEP_DISPATCHING = "step_dispatching"
    STEP_SKIPPED = "step_skipped"
    AWAITING_APPROVAL = "awaiting_approval"
    COMPLETED = "completed"
    ABORTED = "aborted"
    CANCELLED = "cancelled"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {RunState.COMPLETED, RunState.ABORTED, RunState.CANCELLED, RunState.FAILED}
)


@dataclass
class StepRecord:
    """One executed step in run order."""

    step_id: str
    step_name: str
    result: Result
    duration_ms: int = 0


@dataclass
class RunResult:
    """Result of one workflow run.

    ``steps`` holds executed (not skipped) steps in the order they ran,
    including partial results of aborted or cancelled runs.
    """

    workflow_id: str
    workflow_name: str
    status: RunState = RunState.READY
    steps: list[StepRecord] = field(default_factory=list)
    trace: list[tuple[RunState, str | None]] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    hook_error: str | None = None

    @property
    def completed(self) -> bool:
        return self.status == RunState.COMPLETED

    @property
    def step_ids(self) -> list[str]:
        return [record.step_id for record in self.steps]

    @property
    def failed_steps(self) -> list[StepRecord]:
        return [record for record in self.steps if not record.result.success]

    def transition(self, state: RunState, step_id: str | None = None) -> None:
        self.trace.append((state, step_id))
        if state in TERMINAL_STATES:
            self.status = state
            self.completed_at = datetime.now(UTC)

    def as_list(self) -> list[dict]:
        """The ordered ``[{step, result}]`` view of the run."""
        return [{"step": r.step_name, "result": r.result} for r in self.steps]

    def to_dict(self) -> dict:
        return {
            "workflow_id": self.workflow_id,
            "workflow_name": self.workflow_name,
            "status": self.status.value,
            "steps": [
                {
                    "step_id": r.step_id,
                    "step": r.step_name,
                    "duration_ms": r.duration_ms,
                    **r.result.to_dict(),
                }
                for r in self.steps
            ],
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "hook_error": self.hook_error,
        }
