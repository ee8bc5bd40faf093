"""Tests for the task dispatcher."""

import logging

import pytest

from codeforge.errors import WorkerUnavailableError
from codeforge.workers.base import CodebaseSnapshot, Context, Result, Task
from codeforge.workers.dispatcher import TASK_TYPE_TO_WORKER, TASK_TYPES, TaskDispatcher
from codeforge.workers.registry import WorkerRegistry

from conftest import StubWorker


@pytest.fixture
def context():
    return Context(codebase=CodebaseSnapshot(root_dir="/repo"))


@pytest.fixture
def dispatcher(registry):
    return TaskDispatcher(registry)


class TestRouting:
    """Task type to worker mapping."""

    @pytest.mark.parametrize(
        "task_type,worker_key",
        [
            ("code-generation", "codeGeneration"),
            ("code-review", "codeReview"),
            ("error-fixing", "errorFixing"),
            ("refactoring", "refactoring"),
            ("testing", "testing"),
        ],
    )
    def test_dispatches_to_mapped_worker(self, dispatcher, workers, context, task_type, worker_key):
        task = Task(id="t", type=task_type)

        result = dispatcher.dispatch(task, context)

        assert result.success is True
        assert workers[worker_key].calls == [task]

    def test_task_types_cover_table(self):
        assert TASK_TYPES == set(TASK_TYPE_TO_WORKER)
        assert TASK_TYPE_TO_WORKER["langgraph"] == "langgraph"

    def test_worker_result_returned_unmodified(self, dispatcher, workers, context):
        expected = Result.ok({"code": "x = 1"}, model="m")
        workers["codeGeneration"].queue(expected)

        assert dispatcher.dispatch(Task(id="t", type="code-generation"), context) is expected

    def test_custom_routes(self, context):
        reg = WorkerRegistry()
        worker = StubWorker("docs")
        reg.register(worker)
        dispatcher = TaskDispatcher(reg, routes={"documentation": "docs"})

        result = dispatcher.dispatch(Task(id="t", type="documentation"), context)

        assert result.success is True
        assert len(worker.calls) == 1


class TestUnavailable:
    """Dispatch never raises for missing workers."""

    def test_unknown_type_yields_failed_result(self, dispatcher, context):
        result = dispatcher.dispatch(Task(id="t", type="poetry"), context)

        assert result.success is False
        assert "Unknown task type: poetry" in result.error
        assert result.metadata["error_code"] == "WORKER_UNAVAILABLE"
        assert result.metadata["task_type"] == "poetry"

    def test_unregistered_worker_yields_failed_result(self, context):
        dispatcher = TaskDispatcher(WorkerRegistry())

        result = dispatcher.dispatch(Task(id="t", type="code-review"), context)

        assert result.success is False
        assert result.error
        assert result.metadata["worker"] == "codeReview"

    def test_resolve_raises(self, dispatcher):
        with pytest.raises(WorkerUnavailableError) as exc_info:
            dispatcher.resolve(Task(id="t", type="poetry"))

        assert exc_info.value.code == "WORKER_UNAVAILABLE"

    def test_worker_exception_yields_failed_result(self, context):
        reg = WorkerRegistry()
        reg.register(StubWorker("testing", error=ValueError("bad input")))

        result = TaskDispatcher(reg).dispatch(Task(id="t", type="testing"), context)

        assert result.success is False
        assert result.error == "testing failed: bad input"
        assert result.metadata == {
            "error_code": "WORKER_EXCEPTION",
            "worker": "testing",
            "exception_type": "ValueError",
        }


class TestAsyncDispatch:
    """dispatch_async mirrors dispatch."""

    @pytest.mark.asyncio
    async def test_dispatch_async(self, dispatcher, workers, context):
        result = await dispatcher.dispatch_async(Task(id="t", type="code-review"), context)

        assert result.success is True
        assert len(workers["codeReview"].calls) == 1

    @pytest.mark.asyncio
    async def test_dispatch_async_unknown_type(self, dispatcher, context):
        result = await dispatcher.dispatch_async(Task(id="t", type="poetry"), context)

        assert result.success is False
        assert result.metadata["error_code"] == "WORKER_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_dispatch_async_worker_exception(self, context):
        reg = WorkerRegistry()
        reg.register(StubWorker("testing", error=RuntimeError("down")))

        result = await TaskDispatcher(reg).dispatch_async(Task(id="t", type="testing"), context)

        assert result.success is False
        assert result.metadata["error_code"] == "WORKER_EXCEPTION"

    @pytest.mark.asyncio
    async def test_dispatch_async_logs_timing(self, dispatcher, context, caplog):
        with caplog.at_level(logging.DEBUG, logger="codeforge.workers.dispatcher"):
            await dispatcher.dispatch_async(Task(id="t", type="testing"), context)

        assert "Task t handled by testing in" in caplog.text
        assert "(success=True)" in caplog.text

    def test_dispatch_logs_timing(self, dispatcher, context, caplog):
        with caplog.at_level(logging.DEBUG, logger="codeforge.workers.dispatcher"):
            dispatcher.dispatch(Task(id="t", type="testing"), context)

        assert "Task t handled by testing in" in caplog.text


class TestOrchestrate:
    """Sequential multi-task dispatch."""

    def test_records_each_result(self, dispatcher, context, workers):
        workers["codeReview"].queue(Result.failure("issues"))
        tasks = [
            Task(id="gen", type="code-generation"),
            Task(id="review", type="code-review"),
        ]

        results = dispatcher.orchestrate(tasks, context)

        assert [r.success for r in results] == [True, False]
        assert context.result_of("gen") is results[0]
        assert context.result_of("review") is results[1]
