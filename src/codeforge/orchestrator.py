"""Composition root and public surface of the orchestration engine.

Owns the worker registry, workflow store, dispatcher and engine for one
process. Build it from settings with ``Orchestrator.from_settings()``:

    orchestrator = Orchestrator.from_settings()
    result = orchestrator.run_workflow("code-generation", {"requirements": "..."})
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from codeforge.codebase.snapshot import FileSystemSnapshotProvider, SnapshotProvider
from codeforge.config.settings import Settings, get_settings
from codeforge.errors import InvalidDefinitionError
from codeforge.hooks.base import PublishHook
from codeforge.hooks.git import GitPublishHook
from codeforge.providers.router import ModelRouter, build_router
from codeforge.validation.code_validator import CodeValidator
from codeforge.workers.builtin import build_worker_registry
from codeforge.workers.dispatcher import TaskDispatcher
from codeforge.workers.registry import WorkerRegistry
from codeforge.workflow.approval import ApprovalCallback
from codeforge.workflow.engine import RunOptions, WorkflowEngine
from codeforge.workflow.loader import workflow_from_dict
from codeforge.workflow.models import Workflow
from codeforge.workflow.results import RunResult
from codeforge.workflow.store import WorkflowStore

logger = logging.getLogger(__name__)


class Orchestrator:
    """Registers, persists and runs workflows."""

    def __init__(
        self,
        workers: WorkerRegistry,
        store: WorkflowStore | None = None,
        snapshot_provider: SnapshotProvider | None = None,
        hook: PublishHook | None = None,
        approval_callback: ApprovalCallback | None = None,
        workflows_dir: str | Path | None = None,
        require_approval: bool = True,
        commit_on_success: bool = False,
        strict_transitions: bool = False,
        max_steps: int = 100,
    ):
        """Initialize orchestrator.

        Args:
            workers: Worker registry tasks are dispatched against
            store: Workflow store (a new empty store when omitted)
            snapshot_provider: Builds each run's codebase snapshot
            hook: Commit/publish hook for completed runs
            approval_callback: Default failed-step approval callback
            workflows_dir: Directory that created workflows are persisted to
            require_approval: Default for the failed-step approval gate
            commit_on_success: Default for committing after completed runs
            strict_transitions: Default for rejecting unknown next step ids
            max_steps: Maximum steps visited in one run
        """
        self.workers = workers
        self.store = store or WorkflowStore()
        self.dispatcher = TaskDispatcher(workers)
        self.workflows_dir = Path(workflows_dir) if workflows_dir else None
        self.engine = WorkflowEngine(
            store=self.store,
            dispatcher=self.dispatcher,
            snapshot_provider=snapshot_provider,
            hook=hook,
            approval_callback=approval_callback,
            require_approval=require_approval,
            commit_on_success=commit_on_success,
            strict_transitions=strict_transitions,
            max_steps=max_steps,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        router: ModelRouter | None = None,
        approval_callback: ApprovalCallback | None = None,
        hook: PublishHook | None = None,
        load_custom: bool = True,
    ) -> Orchestrator:
        """Build the default orchestrator.

        Registers the enabled workers and the built-in workflows, then the
        custom workflows found in ``settings.workflows_dir``.
        """
        settings = settings or get_settings()
        router = router or build_router(settings)
        workers = build_worker_registry(settings, router, CodeValidator())

        orchestrator = cls(
            workers=workers,
            snapshot_provider=FileSystemSnapshotProvider(max_file_bytes=settings.max_file_bytes),
            hook=hook or GitPublishHook(),
            approval_callback=approval_callback,
            workflows_dir=settings.workflows_dir,
            require_approval=settings.require_approval,
            commit_on_success=settings.auto_commit,
            strict_transitions=settings.strict_transitions,
            max_steps=settings.max_steps,
        )
        orchestrator.store.load_builtins()
        if load_custom:
            orchestrator.store.load_directory(settings.workflows_dir)
        return orchestrator

    def register_workflow(self, workflow: Workflow) -> None:
        self.store.register(workflow)

    def get_workflow(self, workflow_id: str) -> Workflow:
        """Raises WorkflowNotFoundError when the id is unknown."""
        return self.store.get(workflow_id)

    def list_workflows(self) -> list[Workflow]:
        return list(self.store.list_all().values())

    def run_workflow(
        self,
        workflow_id: str,
        run_input: dict[str, Any] | None = None,
        options: RunOptions | None = None,
    ) -> RunResult:
        return self.engine.run(workflow_id, run_input, options)

    async def run_workflow_async(
        self,
        workflow_id: str,
        run_input: dict[str, Any] | None = None,
        options: RunOptions | None = None,
    ) -> RunResult:
        return await self.engine.run_async(workflow_id, run_input, options)

    def create_workflow(self, definition: Workflow | dict) -> Workflow:
        """Validate, register and persist a new workflow.

        Raises:
            InvalidDefinitionError: If the definition is invalid or cannot be
                persisted; nothing is registered in that case
        """
        if isinstance(definition, Workflow):
            workflow = definition
        else:
            workflow = workflow_from_dict(definition)
        errors = workflow.validate()
        if errors:
            raise InvalidDefinitionError(
                f"Invalid workflow definition: {'; '.join(errors)}", errors=errors
            )

        if self.workflows_dir is not None:
            self.store.save(workflow, self.workflows_dir)
        self.store.register(workflow)
        logger.info("Created workflow %s", workflow.id)
        return workflow
