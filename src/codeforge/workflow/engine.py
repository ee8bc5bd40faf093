"""Workflow execution engine.

Walks a workflow graph one step at a time:

    READY -> STEP_PENDING -> STEP_DISPATCHING | STEP_SKIPPED
          -> [AWAITING_APPROVAL] -> STEP_PENDING ... -> COMPLETED | ABORTED

Steps run strictly sequentially. The next step is decided only after the
current step's Result has been recorded in the run context.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from codeforge.errors import (
    CodeForgeError,
    InvalidTransitionError,
    StepExecutionError,
    WorkflowError,
)
from codeforge.workers.base import CodebaseSnapshot, Context, Result
from codeforge.workers.dispatcher import TaskDispatcher

from .approval import ApprovalCallback, approval_message, auto_approve
from .models import Workflow, WorkflowStep
from .results import RunResult, RunState, StepRecord
from .store import WorkflowStore

if TYPE_CHECKING:
    from codeforge.codebase.snapshot import SnapshotProvider
    from codeforge.hooks.base import PublishHook

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 100


class CancellationToken:
    """Cooperative cancellation flag checked by the engine between steps."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class RunOptions:
    """Per-run options. ``None`` means use the engine default."""

    codebase_dir: str | Path | None = None
    commit_on_success: bool | None = None
    commit_message: str | None = None
    require_approval: bool | None = None
    strict_transitions: bool | None = None
    approval_callback: ApprovalCallback | None = None
    cancellation: CancellationToken | None = None


@dataclass
class _ResolvedOptions:
    codebase_dir: str
    commit_on_success: bool
    commit_message: str
    require_approval: bool
    strict_transitions: bool
    approval_callback: ApprovalCallback
    cancellation: CancellationToken | None


class WorkflowEngine:
    """Executes registered workflows against a dispatcher."""

    def __init__(
        self,
        store: WorkflowStore,
        dispatcher: TaskDispatcher,
        snapshot_provider: SnapshotProvider | None = None,
        hook: PublishHook | None = None,
        approval_callback: ApprovalCallback | None = None,
        require_approval: bool = True,
        commit_on_success: bool = False,
        strict_transitions: bool = False,
        max_steps: int = DEFAULT_MAX_STEPS,
    ):
        """Initialize engine.

        Args:
            store: Workflow definitions to run from
            dispatcher: Routes each step's task to a worker
            snapshot_provider: Builds the codebase snapshot seeding each run
            hook: Commit/publish hook invoked after a completed run
            approval_callback: Asked whether to continue after a failed step
            require_approval: Default for the failed-step approval gate
            commit_on_success: Default for committing after a completed run
            strict_transitions: Default for rejecting unknown next step ids
            max_steps: Maximum steps visited in one run
        """
        self.store = store
        self.dispatcher = dispatcher
        self.snapshot_provider = snapshot_provider
        self.hook = hook
        self.approval_callback = approval_callback or auto_approve
        self.require_approval = require_approval
        self.commit_on_success = commit_on_success
        self.strict_transitions = strict_transitions
        self.max_steps = max_steps

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        workflow_id: str,
        run_input: dict[str, Any] | None = None,
        options: RunOptions | None = None,
    ) -> RunResult:
        """Run a workflow to completion, abort or cancellation.

        Raises:
            WorkflowNotFoundError: If no workflow is registered under the id
            StepExecutionError: If a condition or next selector raises
            InvalidTransitionError: On an unknown next step id in strict mode
            WorkflowError: If the run exceeds max_steps

        Run-level errors carry the partial RunResult, with the steps already
        recorded, as ``run_result``.
        """
        workflow = self.store.get(workflow_id)
        opts = self._resolve_options(workflow, options)
        context = self._build_context(workflow, run_input, opts)
        result = self._start(workflow)
        run_input = dict(run_input or {})

        try:
            step = workflow.entry_step
            visited = 0
            while step is not None:
                if self._is_cancelled(opts, result, step):
                    return result
                visited = self._guard(workflow, visited)

                self._transition(result, RunState.STEP_PENDING, step.id)
                if self._should_run(step, context):
                    self._transition(result, RunState.STEP_DISPATCHING, step.id)
                    start = time.time()
                    step_result = self.dispatcher.dispatch(step.task.build(run_input), context)
                    self._record(step, step_result, context, result, start)

                    if self._needs_approval(step_result, opts):
                        self._transition(result, RunState.AWAITING_APPROVAL, step.id)
                        if not opts.approval_callback(approval_message(step.name)):
                            self._transition(result, RunState.ABORTED, step.id)
                            return result
                else:
                    self._transition(result, RunState.STEP_SKIPPED, step.id)

                step = self._next_step(workflow, step, context, opts)
        except CodeForgeError as e:
            self._fail(result, e)
            raise
        except Exception:
            self._transition(result, RunState.FAILED)
            raise

        self._complete(workflow, opts, result)
        return result

    async def run_async(
        self,
        workflow_id: str,
        run_input: dict[str, Any] | None = None,
        options: RunOptions | None = None,
    ) -> RunResult:
        """Async version of run().

        Workers are awaited through execute_async. The snapshot provider,
        approval callback and publish hook are blocking and run in the
        default executor.
        """
        loop = asyncio.get_running_loop()
        workflow = self.store.get(workflow_id)
        opts = self._resolve_options(workflow, options)
        context = await loop.run_in_executor(
            None, self._build_context, workflow, run_input, opts
        )
        result = self._start(workflow)
        run_input = dict(run_input or {})

        try:
            step = workflow.entry_step
            visited = 0
            while step is not None:
                if self._is_cancelled(opts, result, step):
                    return result
                visited = self._guard(workflow, visited)

                self._transition(result, RunState.STEP_PENDING, step.id)
                if self._should_run(step, context):
                    self._transition(result, RunState.STEP_DISPATCHING, step.id)
                    start = time.time()
                    step_result = await self.dispatcher.dispatch_async(
                        step.task.build(run_input), context
                    )
                    self._record(step, step_result, context, result, start)

                    if self._needs_approval(step_result, opts):
                        self._transition(result, RunState.AWAITING_APPROVAL, step.id)
                        approved = await loop.run_in_executor(
                            None, opts.approval_callback, approval_message(step.name)
                        )
                        if not approved:
                            self._transition(result, RunState.ABORTED, step.id)
                            return result
                else:
                    self._transition(result, RunState.STEP_SKIPPED, step.id)

                step = self._next_step(workflow, step, context, opts)
        except CodeForgeError as e:
            self._fail(result, e)
            raise
        except Exception:
            self._transition(result, RunState.FAILED)
            raise

        await loop.run_in_executor(None, self._complete, workflow, opts, result)
        return result

    # ------------------------------------------------------------------
    # Run helpers
    # ------------------------------------------------------------------

    def _resolve_options(self, workflow: Workflow, options: RunOptions | None) -> _ResolvedOptions:
        options = options or RunOptions()

        def pick(value, default):
            return default if value is None else value

        return _ResolvedOptions(
            codebase_dir=str(options.codebase_dir or os.getcwd()),
            commit_on_success=pick(options.commit_on_success, self.commit_on_success),
            commit_message=options.commit_message or f"CodeForge: Run workflow {workflow.name}",
            require_approval=pick(options.require_approval, self.require_approval),
            strict_transitions=pick(options.strict_transitions, self.strict_transitions),
            approval_callback=options.approval_callback or self.approval_callback,
            cancellation=options.cancellation,
        )

    def _build_context(
        self,
        workflow: Workflow,
        run_input: dict[str, Any] | None,
        opts: _ResolvedOptions,
    ) -> Context:
        if self.snapshot_provider is not None:
            codebase = self.snapshot_provider.analyze(opts.codebase_dir)
        else:
            codebase = CodebaseSnapshot(root_dir=opts.codebase_dir)
        return Context(
            codebase=codebase,
            options={"workflow_id": workflow.id, "input": dict(run_input or {})},
        )

    def _start(self, workflow: Workflow) -> RunResult:
        result = RunResult(workflow_id=workflow.id, workflow_name=workflow.name)
        logger.info("Starting workflow %s", workflow.id, extra={"workflow_id": workflow.id})
        self._transition(result, RunState.READY)
        return result

    def _transition(self, result: RunResult, state: RunState, step_id: str | None = None) -> None:
        result.transition(state, step_id)
        logger.debug(
            "Workflow %s -> %s%s",
            result.workflow_id,
            state.value,
            f" ({step_id})" if step_id else "",
            extra={"workflow_id": result.workflow_id, "step_id": step_id, "run_state": state.value},
        )

    def _is_cancelled(self, opts: _ResolvedOptions, result: RunResult, step: WorkflowStep) -> bool:
        if opts.cancellation is None or not opts.cancellation.cancelled:
            return False
        logger.info("Workflow %s cancelled before step %s", result.workflow_id, step.id)
        self._transition(result, RunState.CANCELLED, step.id)
        return True

    def _fail(self, result: RunResult, error: CodeForgeError) -> None:
        self._transition(result, RunState.FAILED)
        error.run_result = result
        logger.error(
            "Workflow %s failed after %d step(s): %s",
            result.workflow_id,
            len(result.steps),
            error,
            extra={"workflow_id": result.workflow_id},
        )

    def _guard(self, workflow: Workflow, visited: int) -> int:
        visited += 1
        if visited > self.max_steps:
            raise WorkflowError(
                f"Workflow {workflow.id} exceeded {self.max_steps} steps",
                workflow_id=workflow.id,
                max_steps=self.max_steps,
            )
        return visited

    def _should_run(self, step: WorkflowStep, context: Context) -> bool:
        try:
            return step.should_run(context)
        except Exception as e:
            raise StepExecutionError(
                f"Condition of step {step.id} raised: {e}", step=step.id, cause=e
            ) from e

    def _record(
        self,
        step: WorkflowStep,
        step_result: Result,
        context: Context,
        result: RunResult,
        start: float,
    ) -> None:
        duration_ms = int((time.time() - start) * 1000)
        context.record(step.id, step_result)
        result.steps.append(
            StepRecord(
                step_id=step.id,
                step_name=step.name,
                result=step_result,
                duration_ms=duration_ms,
            )
        )
        if not step_result.success:
            logger.warning(
                "Step %s failed: %s",
                step.id,
                step_result.error,
                extra={"workflow_id": result.workflow_id, "step_id": step.id},
            )

    def _needs_approval(self, step_result: Result, opts: _ResolvedOptions) -> bool:
        return not step_result.success and opts.require_approval

    def _next_step(
        self,
        workflow: Workflow,
        step: WorkflowStep,
        context: Context,
        opts: _ResolvedOptions,
    ) -> WorkflowStep | None:
        try:
            next_id = step.resolve_next(context)
        except Exception as e:
            raise StepExecutionError(
                f"Next step of {step.id} could not be resolved: {e}", step=step.id, cause=e
            ) from e

        if next_id is None:
            return None

        next_step = workflow.get_step(next_id)
        if next_step is None:
            if opts.strict_transitions:
                raise InvalidTransitionError(
                    f"Step {step.id} points to unknown step {next_id}",
                    step=step.id,
                    target=next_id,
                )
            logger.warning(
                "Step %s points to unknown step %s; ending workflow %s",
                step.id,
                next_id,
                workflow.id,
            )
        return next_step

    def _complete(self, workflow: Workflow, opts: _ResolvedOptions, result: RunResult) -> None:
        self._transition(result, RunState.COMPLETED)
        logger.info(
            "Workflow %s completed with %d step(s)",
            workflow.id,
            len(result.steps),
            extra={"workflow_id": workflow.id},
        )
        if not opts.commit_on_success or self.hook is None:
            return

        try:
            self.hook.commit(opts.commit_message, repo_dir=opts.codebase_dir)
            self.hook.push(repo_dir=opts.codebase_dir)
        except Exception as e:
            logger.error("Publishing changes for workflow %s failed: %s", workflow.id, e)
            result.hook_error = str(e)
