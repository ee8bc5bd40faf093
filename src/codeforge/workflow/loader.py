"""Workflow definition file loader and validator.

Definition files hold one workflow each, as JSON or YAML. Guards and
computed transitions are written declaratively::

    {
      "id": "triage",
      "name": "Triage",
      "description": "Review, then fix or refactor",
      "steps": [
        {"id": "review", "name": "Review", "description": "...",
         "task": {"type": "code-review"},
         "next": {"branches": [{"when": {"field": "results.review.success",
                                         "operator": "equals", "value": false},
                                "goto": "fix"}],
                  "default": "refactor"}},
        ...
      ]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from codeforge.errors import InvalidDefinitionError
from codeforge.workers.dispatcher import TASK_TYPES

from .models import (
    VALID_OPERATORS,
    ComputedNext,
    ConditionConfig,
    RouteTable,
    StaticNext,
    TaskTemplate,
    Workflow,
    WorkflowStep,
)

logger = logging.getLogger(__name__)

DEFINITION_SUFFIXES = (".json", ".yaml", ".yml")


def _validate_condition(cond: Any, prefix: str) -> list[str]:
    if not isinstance(cond, dict):
        return [f"{prefix}: condition must be an object"]

    errors = []
    for req in ("field", "operator"):
        if req not in cond:
            errors.append(f"{prefix}: condition missing '{req}'")

    field = cond.get("field")
    if "field" in cond and (not isinstance(field, str) or not field.strip()):
        errors.append(f"{prefix}: condition field must be a non-empty dotted path string")

    # 'value' is required for all operators except 'not_empty'
    if cond.get("operator") != "not_empty" and "value" not in cond:
        errors.append(f"{prefix}: condition missing 'value'")

    if "operator" in cond and cond["operator"] not in VALID_OPERATORS:
        errors.append(f"{prefix}: invalid condition operator '{cond['operator']}'")

    return errors


def _validate_next(value: Any, prefix: str) -> list[str]:
    if value is None or isinstance(value, str):
        return []
    if not isinstance(value, dict):
        return [f"{prefix}: next must be a step id or a branch table"]

    errors = []
    branches = value.get("branches", [])
    if not isinstance(branches, list):
        return [f"{prefix}: next.branches must be a list"]
    for i, branch in enumerate(branches):
        branch_prefix = f"{prefix} branch {i + 1}"
        if not isinstance(branch, dict):
            errors.append(f"{branch_prefix}: must be an object")
            continue
        if "when" not in branch:
            errors.append(f"{branch_prefix}: missing 'when'")
        else:
            errors.extend(_validate_condition(branch["when"], branch_prefix))
        if not isinstance(branch.get("goto"), str) or not branch.get("goto"):
            errors.append(f"{branch_prefix}: 'goto' must be a step id")
    default = value.get("default")
    if default is not None and not isinstance(default, str):
        errors.append(f"{prefix}: next.default must be a step id")
    return errors


def _validate_task(task: Any, prefix: str) -> list[str]:
    if not isinstance(task, dict):
        return [f"{prefix}: missing required object 'task'"]

    errors = []
    task_type = task.get("type")
    if not task_type:
        errors.append(f"{prefix}: task missing 'type'")
    elif task_type not in TASK_TYPES:
        errors.append(f"{prefix}: unknown task type '{task_type}'")
    if "input" in task and not isinstance(task["input"], dict):
        errors.append(f"{prefix}: task input must be an object")
    if "options" in task and not isinstance(task["options"], dict):
        errors.append(f"{prefix}: task options must be an object")
    return errors


def _validate_step(step: Any, index: int) -> list[str]:
    """Validate a single workflow step."""
    prefix = f"Step {index + 1}"

    if not isinstance(step, dict):
        return [f"{prefix}: must be an object"]

    errors = []
    if not isinstance(step.get("id"), str) or not step["id"].strip():
        errors.append(f"{prefix}: 'id' must be a non-empty string")
    else:
        prefix = f"Step '{step['id']}'"

    for req in ("name", "description"):
        if req in step and not isinstance(step[req], str):
            errors.append(f"{prefix}: '{req}' must be a string")

    errors.extend(_validate_task(step.get("task"), prefix))
    if "condition" in step:
        errors.extend(_validate_condition(step["condition"], prefix))
    errors.extend(_validate_next(step.get("next"), prefix))
    return errors


def validate_workflow(data: Any) -> list[str]:
    """Validate raw workflow data.

    Args:
        data: Workflow dictionary

    Returns:
        List of validation errors (empty if valid)
    """
    if not isinstance(data, dict):
        return ["Workflow definition must be a mapping"]

    errors = []
    for req in ("id", "name", "description"):
        if req not in data:
            errors.append(f"Missing required field: {req}")
        elif not isinstance(data[req], str) or not data[req].strip():
            errors.append(f"Field '{req}' must be a non-empty string")

    steps = data.get("steps")
    if steps is None:
        errors.append("Missing required field: steps")
    elif not isinstance(steps, list):
        errors.append("Field 'steps' must be a list")
    elif not steps:
        errors.append("Workflow must have at least one step")
    else:
        for i, step in enumerate(steps):
            errors.extend(_validate_step(step, i))

    return errors


def _parse_next(value: Any) -> StaticNext | ComputedNext | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return StaticNext(value)
    return ComputedNext(RouteTable.from_dict(value))


def _parse_step(data: dict) -> WorkflowStep:
    task = data["task"]
    return WorkflowStep(
        id=data["id"],
        name=data.get("name") or data["id"],
        description=data.get("description", ""),
        task=TaskTemplate(
            id=task.get("id", data["id"]),
            type=task["type"],
            description=task.get("description", data.get("description", "")),
            input=dict(task.get("input", {})),
            options=dict(task.get("options", {})),
        ),
        condition=ConditionConfig.from_dict(data["condition"]) if "condition" in data else None,
        next=_parse_next(data.get("next")),
    )


def workflow_from_dict(data: Any) -> Workflow:
    """Build a Workflow from raw definition data.

    Raises:
        InvalidDefinitionError: If the data fails validation
    """
    errors = validate_workflow(data)
    if errors:
        raise InvalidDefinitionError(
            f"Workflow validation failed: {'; '.join(errors)}", errors=errors
        )

    workflow = Workflow(
        id=data["id"],
        name=data["name"],
        description=data["description"],
        steps=[_parse_step(s) for s in data["steps"]],
    )
    graph_errors = workflow.validate()
    if graph_errors:
        raise InvalidDefinitionError(
            f"Workflow validation failed: {'; '.join(graph_errors)}", errors=graph_errors
        )
    return workflow


def _dump_next(step: WorkflowStep) -> str | dict | None:
    if step.next is None:
        return None
    if isinstance(step.next, StaticNext):
        return step.next.step_id
    if isinstance(step.next.fn, RouteTable):
        return step.next.fn.to_dict()
    raise InvalidDefinitionError(
        f"Step '{step.id}': computed next is a Python callable and cannot be persisted",
        errors=[f"Step '{step.id}': next is not serializable"],
    )


def _dump_condition(step: WorkflowStep) -> dict | None:
    if step.condition is None:
        return None
    if isinstance(step.condition, ConditionConfig):
        return step.condition.to_dict()
    raise InvalidDefinitionError(
        f"Step '{step.id}': condition is a Python callable and cannot be persisted",
        errors=[f"Step '{step.id}': condition is not serializable"],
    )


def workflow_to_dict(workflow: Workflow) -> dict:
    """Serialize a Workflow into its self-describing definition record.

    Raises:
        InvalidDefinitionError: If a step uses an opaque callable guard or next selector
    """
    steps = []
    for step in workflow.steps:
        entry: dict[str, Any] = {
            "id": step.id,
            "name": step.name,
            "description": step.description,
            "task": {
                "id": step.task.id,
                "type": step.task.type,
                "description": step.task.description,
                "input": step.task.input,
                "options": step.task.options,
            },
        }
        condition = _dump_condition(step)
        if condition is not None:
            entry["condition"] = condition
        next_value = _dump_next(step)
        if next_value is not None:
            entry["next"] = next_value
        steps.append(entry)

    return {
        "id": workflow.id,
        "name": workflow.name,
        "description": workflow.description,
        "steps": steps,
    }


def load_workflow_file(path: str | Path) -> Workflow:
    """Load one workflow from a JSON or YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidDefinitionError: If the file can't be parsed or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Workflow file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidDefinitionError(f"Invalid workflow file {path}: {e}") from e

    return workflow_from_dict(data)


def dump_workflow_file(workflow: Workflow, path: str | Path) -> Path:
    """Write a workflow as pretty-printed JSON.

    Raises:
        InvalidDefinitionError: If the definition holds values JSON can't
            represent, such as dates parsed from YAML; no file is written
    """
    path = Path(path)
    data = workflow_to_dict(workflow)
    try:
        text = json.dumps(data, indent=2)
    except (TypeError, ValueError) as e:
        raise InvalidDefinitionError(
            f"Workflow {workflow.id} cannot be saved as JSON: {e}", errors=[str(e)]
        ) from e
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
    return path
