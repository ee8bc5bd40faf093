"""Pytest configuration and fixtures."""

from unittest.mock import MagicMock

import pytest

from codeforge.codebase.snapshot import StaticSnapshotProvider
from codeforge.hooks.base import PublishHook
from codeforge.workers.base import Result, Task, Worker
from codeforge.workers.dispatcher import TaskDispatcher
from codeforge.workers.registry import WorkerRegistry
from codeforge.workflow.engine import WorkflowEngine
from codeforge.workflow.models import TaskTemplate, Workflow, WorkflowStep
from codeforge.workflow.store import WorkflowStore


class StubWorker(Worker):
    """Worker that records its calls and replays queued results."""

    def __init__(self, name, results=None, error=None):
        self.name = name
        self.calls: list[Task] = []
        self.contexts = []
        self._results = list(results or [])
        self._error = error

    def queue(self, *results):
        self._results.extend(results)

    def execute(self, task, context):
        self.calls.append(task)
        self.contexts.append(dict(context.results))
        if self._error is not None:
            raise self._error
        if self._results:
            return self._results.pop(0)
        return Result.ok({"task": task.id, "input": dict(task.input)})


@pytest.fixture
def workers():
    """One stub worker per built-in worker key."""
    return {
        key: StubWorker(key)
        for key in ("codeGeneration", "codeReview", "errorFixing", "refactoring", "testing")
    }


@pytest.fixture
def registry(workers):
    reg = WorkerRegistry()
    for worker in workers.values():
        reg.register(worker)
    return reg


@pytest.fixture
def store():
    return WorkflowStore()


@pytest.fixture
def hook():
    return MagicMock(spec=PublishHook)


@pytest.fixture
def engine(store, registry, hook):
    return WorkflowEngine(
        store=store,
        dispatcher=TaskDispatcher(registry),
        snapshot_provider=StaticSnapshotProvider({"app.py": "print('hi')\n"}),
        hook=hook,
        require_approval=False,
    )


@pytest.fixture
def make_step():
    """Factory for steps with a default task template."""

    def _make(step_id, task_type="code-generation", next=None, condition=None, **task_input):
        return WorkflowStep(
            id=step_id,
            name=step_id.upper(),
            description=f"Step {step_id}",
            task=TaskTemplate(id=step_id, type=task_type, input=task_input),
            condition=condition,
            next=next,
        )

    return _make


@pytest.fixture
def make_workflow(make_step):
    """Factory for a linear workflow of code-generation steps."""

    def _make(workflow_id="linear", step_ids=("a", "b", "c")):
        steps = []
        for i, step_id in enumerate(step_ids):
            following = step_ids[i + 1] if i + 1 < len(step_ids) else None
            steps.append(make_step(step_id, next=following))
        return Workflow(id=workflow_id, name="Linear", description="Linear workflow", steps=steps)

    return _make
