"""Tests for workflow definition loading, validation and serialization."""

import json
from datetime import date

import pytest
import yaml

from codeforge.errors import InvalidDefinitionError
from codeforge.workers.base import CodebaseSnapshot, Context, Result
from codeforge.workflow.loader import (
    dump_workflow_file,
    load_workflow_file,
    validate_workflow,
    workflow_from_dict,
    workflow_to_dict,
)
from codeforge.workflow.models import (
    ComputedNext,
    ConditionConfig,
    RouteTable,
    StaticNext,
    TaskTemplate,
    Workflow,
    WorkflowStep,
)


def triage_definition():
    return {
        "id": "triage",
        "name": "Triage",
        "description": "Review, then fix or refactor",
        "steps": [
            {
                "id": "review",
                "name": "Review",
                "description": "Review the file",
                "task": {"type": "code-review", "input": {"max_files": 2}},
                "next": {
                    "branches": [
                        {
                            "when": {
                                "field": "results.review.success",
                                "operator": "equals",
                                "value": False,
                            },
                            "goto": "fix",
                        }
                    ],
                    "default": "refactor",
                },
            },
            {
                "id": "fix",
                "name": "Fix",
                "description": "Fix errors",
                "task": {"type": "error-fixing"},
                "next": "test",
            },
            {
                "id": "refactor",
                "name": "Refactor",
                "description": "Tidy up",
                "task": {"type": "refactoring", "options": {"temperature": 0.3}},
                "condition": {"field": "options.input.file", "operator": "not_empty"},
                "next": "test",
            },
            {
                "id": "test",
                "name": "Test",
                "description": "Write tests",
                "task": {"type": "testing"},
            },
        ],
    }


class TestValidateWorkflow:
    """Structural validation of raw definition data."""

    def test_valid_definition(self):
        assert validate_workflow(triage_definition()) == []

    def test_not_a_mapping(self):
        assert validate_workflow(["nope"]) == ["Workflow definition must be a mapping"]

    def test_missing_top_level_fields(self):
        errors = validate_workflow({})

        assert "Missing required field: id" in errors
        assert "Missing required field: name" in errors
        assert "Missing required field: description" in errors
        assert "Missing required field: steps" in errors

    def test_empty_steps(self):
        data = {"id": "w", "name": "W", "description": "d", "steps": []}

        assert validate_workflow(data) == ["Workflow must have at least one step"]

    def test_unknown_task_type(self):
        data = triage_definition()
        data["steps"][3]["task"]["type"] = "deploy"

        assert validate_workflow(data) == ["Step 'test': unknown task type 'deploy'"]

    def test_missing_task(self):
        data = triage_definition()
        del data["steps"][1]["task"]

        assert validate_workflow(data) == ["Step 'fix': missing required object 'task'"]

    def test_step_without_id_uses_position(self):
        data = triage_definition()
        del data["steps"][0]["id"]

        errors = validate_workflow(data)

        assert "Step 1: 'id' must be a non-empty string" in errors

    def test_bad_condition_operator(self):
        data = triage_definition()
        data["steps"][2]["condition"] = {"field": "x", "operator": "matches", "value": 1}

        assert validate_workflow(data) == [
            "Step 'refactor': invalid condition operator 'matches'"
        ]

    def test_condition_value_required(self):
        data = triage_definition()
        data["steps"][2]["condition"] = {"field": "x", "operator": "equals"}

        assert validate_workflow(data) == ["Step 'refactor': condition missing 'value'"]

    @pytest.mark.parametrize("field", [5, "", "   ", None, ["a"]])
    def test_condition_field_must_be_path_string(self, field):
        data = triage_definition()
        data["steps"][2]["condition"] = {"field": field, "operator": "equals", "value": 1}

        assert validate_workflow(data) == [
            "Step 'refactor': condition field must be a non-empty dotted path string"
        ]

    def test_branch_condition_field_checked(self):
        data = triage_definition()
        data["steps"][0]["next"]["branches"][0]["when"]["field"] = 5

        assert validate_workflow(data) == [
            "Step 'review' branch 1: condition field must be a non-empty dotted path string"
        ]

    def test_numeric_condition_field_rejected_from_yaml(self, tmp_path):
        path = tmp_path / "numeric.yaml"
        path.write_text(
            "id: numeric\n"
            "name: Numeric\n"
            "description: Condition on a number\n"
            "steps:\n"
            "  - id: b\n"
            "    name: B\n"
            "    description: d\n"
            "    task: {type: testing}\n"
            "    condition: {field: 5, operator: equals, value: 1}\n"
        )

        with pytest.raises(InvalidDefinitionError) as exc_info:
            load_workflow_file(path)

        assert any("condition field" in error for error in exc_info.value.errors)

    def test_branch_without_goto(self):
        data = triage_definition()
        del data["steps"][0]["next"]["branches"][0]["goto"]

        assert validate_workflow(data) == ["Step 'review' branch 1: 'goto' must be a step id"]

    def test_next_wrong_type(self):
        data = triage_definition()
        data["steps"][1]["next"] = 3

        assert validate_workflow(data) == [
            "Step 'fix': next must be a step id or a branch table"
        ]


class TestWorkflowFromDict:
    """Building workflows from definition data."""

    def test_builds_steps_in_order(self):
        wf = workflow_from_dict(triage_definition())

        assert wf.step_ids() == ["review", "fix", "refactor", "test"]
        assert wf.get_step("fix").next == StaticNext("test")
        assert wf.get_step("test").is_terminal

    def test_branch_table_becomes_computed_next(self):
        wf = workflow_from_dict(triage_definition())
        review = wf.get_step("review")

        assert isinstance(review.next, ComputedNext)
        assert isinstance(review.next.fn, RouteTable)

        ctx = Context(codebase=CodebaseSnapshot(root_dir="."))
        ctx.record("review", Result.failure("bad"))
        assert review.resolve_next(ctx) == "fix"
        ctx.record("review", Result.ok())
        assert review.resolve_next(ctx) == "refactor"

    def test_task_defaults(self):
        wf = workflow_from_dict(triage_definition())
        task = wf.get_step("refactor").task

        assert task.id == "refactor"
        assert task.type == "refactoring"
        assert task.description == "Tidy up"
        assert task.options == {"temperature": 0.3}

    def test_condition_parsed(self):
        wf = workflow_from_dict(triage_definition())

        assert wf.get_step("refactor").condition == ConditionConfig(
            "options.input.file", "not_empty"
        )

    def test_invalid_raises_with_errors(self):
        data = triage_definition()
        data["steps"][1]["next"] = "ghost"

        with pytest.raises(InvalidDefinitionError) as exc_info:
            workflow_from_dict(data)

        assert exc_info.value.errors == ["Step 'fix': next step 'ghost' not found"]

    def test_to_dict_round_trips(self):
        data = workflow_to_dict(workflow_from_dict(triage_definition()))

        rebuilt = workflow_from_dict(data)

        assert workflow_to_dict(rebuilt) == data
        assert data["steps"][0]["next"]["default"] == "refactor"
        assert "next" not in data["steps"][3]

    def test_callable_next_cannot_be_serialized(self):
        wf = Workflow(
            id="w",
            name="W",
            description="d",
            steps=[
                WorkflowStep(
                    id="a",
                    name="A",
                    description="",
                    task=TaskTemplate(id="a", type="testing"),
                    next=lambda ctx: None,
                )
            ],
        )

        with pytest.raises(InvalidDefinitionError, match="cannot be persisted"):
            workflow_to_dict(wf)

    def test_callable_condition_cannot_be_serialized(self):
        wf = Workflow(
            id="w",
            name="W",
            description="d",
            steps=[
                WorkflowStep(
                    id="a",
                    name="A",
                    description="",
                    task=TaskTemplate(id="a", type="testing"),
                    condition=lambda ctx: True,
                )
            ],
        )

        with pytest.raises(InvalidDefinitionError, match="condition"):
            workflow_to_dict(wf)


class TestWorkflowFiles:
    """Reading and writing definition files."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "triage.json"
        path.write_text(json.dumps(triage_definition()))

        assert load_workflow_file(path).id == "triage"

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "triage.yaml"
        path.write_text(yaml.safe_dump(triage_definition()))

        wf = load_workflow_file(path)

        assert wf.name == "Triage"
        assert len(wf.steps) == 4

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_workflow_file(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(InvalidDefinitionError, match="Invalid workflow file"):
            load_workflow_file(path)

    def test_dump_creates_directories(self, tmp_path):
        wf = workflow_from_dict(triage_definition())

        path = dump_workflow_file(wf, tmp_path / "nested" / "triage.json")

        assert path.exists()
        assert json.loads(path.read_text())["id"] == "triage"
        assert load_workflow_file(path).step_ids() == wf.step_ids()

    def test_dump_rejects_values_json_cannot_hold(self, tmp_path):
        data = triage_definition()
        data["steps"][3]["task"]["input"] = {"due": date(2024, 1, 1)}
        wf = workflow_from_dict(data)
        path = tmp_path / "triage.json"

        with pytest.raises(InvalidDefinitionError, match="cannot be saved as JSON"):
            dump_workflow_file(wf, path)

        assert not path.exists()
