"""Tests for the orchestrator facade."""

import json
from datetime import date

import pytest

from codeforge.codebase.snapshot import StaticSnapshotProvider
from codeforge.config.settings import Settings
from codeforge.errors import InvalidDefinitionError, WorkflowNotFoundError
from codeforge.hooks import NullHook
from codeforge.orchestrator import Orchestrator
from codeforge.providers import MockProvider, ModelRouter
from codeforge.workflow import RunOptions, RunState


def definition(workflow_id="review-then-test"):
    return {
        "id": workflow_id,
        "name": "Review then test",
        "description": "Review a file and write tests for it",
        "steps": [
            {
                "id": "review",
                "name": "Review",
                "description": "Review",
                "task": {"type": "code-review"},
                "next": "test",
            },
            {"id": "test", "name": "Test", "description": "Test", "task": {"type": "testing"}},
        ],
    }


@pytest.fixture
def orchestrator(registry, tmp_path):
    orch = Orchestrator(
        workers=registry,
        snapshot_provider=StaticSnapshotProvider({"app.py": "x = 1\n"}),
        workflows_dir=tmp_path / "workflows",
        require_approval=False,
    )
    orch.store.load_builtins()
    return orch


class TestWorkflowManagement:
    """Creating and looking up workflows."""

    def test_lists_builtins(self, orchestrator):
        ids = [wf.id for wf in orchestrator.list_workflows()]

        assert ids == [
            "code-generation",
            "bug-fixing",
            "code-refactoring",
            "langgraph-code-generation",
        ]

    def test_create_registers_and_persists(self, orchestrator, tmp_path):
        workflow = orchestrator.create_workflow(definition())

        assert orchestrator.get_workflow("review-then-test") is workflow
        saved = tmp_path / "workflows" / "review-then-test.json"
        assert json.loads(saved.read_text())["steps"][0]["next"] == "test"

    def test_create_invalid_registers_nothing(self, orchestrator, tmp_path):
        data = definition("broken")
        data["steps"][0]["next"] = "ghost"

        with pytest.raises(InvalidDefinitionError):
            orchestrator.create_workflow(data)

        with pytest.raises(WorkflowNotFoundError):
            orchestrator.get_workflow("broken")
        assert not (tmp_path / "workflows" / "broken.json").exists()

    def test_create_unserializable_input_registers_nothing(self, orchestrator, tmp_path):
        data = definition("dated")
        data["steps"][1]["task"]["input"] = {"due": date(2024, 1, 1)}

        with pytest.raises(InvalidDefinitionError, match="cannot be saved as JSON"):
            orchestrator.create_workflow(data)

        with pytest.raises(WorkflowNotFoundError):
            orchestrator.get_workflow("dated")
        assert not (tmp_path / "workflows" / "dated.json").exists()

    def test_create_without_directory_only_registers(self, registry):
        orch = Orchestrator(workers=registry)

        orch.create_workflow(definition())

        assert orch.get_workflow("review-then-test").step_ids() == ["review", "test"]


class TestRunning:
    """Running through the facade."""

    def test_run_builtin(self, orchestrator, workers):
        result = orchestrator.run_workflow("bug-fixing", {"file": "app.py"})

        assert result.status == RunState.COMPLETED
        assert result.step_ids == ["analyze-bug", "fix-bug", "test-fix"]
        assert workers["errorFixing"].calls[0].input == {"file": "app.py"}

    def test_run_unknown(self, orchestrator):
        with pytest.raises(WorkflowNotFoundError):
            orchestrator.run_workflow("missing")

    @pytest.mark.asyncio
    async def test_run_async(self, orchestrator):
        result = await orchestrator.run_workflow_async("code-refactoring")

        assert result.completed
        assert [entry["step"] for entry in result.as_list()] == [
            "Analyze Code",
            "Refactor Code",
            "Test Refactoring",
        ]


class TestFromSettings:
    """Default wiring from settings."""

    @pytest.fixture
    def settings(self, tmp_path):
        return Settings(
            _env_file=None,
            workflows_dir=tmp_path / "workflows",
            require_approval=False,
            max_iterations=2,
        )

    def test_loads_builtins_and_custom(self, settings):
        settings.workflows_dir.mkdir()
        (settings.workflows_dir / "custom.json").write_text(json.dumps(definition("custom")))

        orch = Orchestrator.from_settings(
            settings, router=ModelRouter([MockProvider()]), hook=NullHook()
        )

        assert "custom" in orch.store
        assert "code-generation" in orch.store
        assert "langgraph" in orch.workers

    def test_runs_end_to_end_with_mock_provider(self, settings, tmp_path):
        project = tmp_path / "project"
        project.mkdir()
        (project / "app.py").write_text("def add(a, b):\n    return a + b\n")

        orch = Orchestrator.from_settings(
            settings, router=ModelRouter([MockProvider()]), hook=NullHook(), load_custom=False
        )
        result = orch.run_workflow(
            "code-generation",
            {"file": "app.py", "language": "python", "requirements": "Add subtract"},
            RunOptions(codebase_dir=project),
        )

        assert result.status == RunState.COMPLETED
        assert result.failed_steps == []
        assert "def generated_" in result.steps[0].result.output
        assert result.steps[1].result.metadata["files_reviewed"] == ["app.py"]
