"""Workflow definition models.

A Workflow is a directed graph of steps. Steps are stored in declaration
order, but execution order is driven by each step's next selector; the
list is only the lookup table.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from codeforge.workers.base import Context, Task

logger = logging.getLogger(__name__)

Condition = Callable[[Context], bool]

Operator = Literal[
    "equals",
    "not_equals",
    "contains",
    "greater_than",
    "less_than",
    "in",
    "not_empty",
]

VALID_OPERATORS = frozenset(
    {"equals", "not_equals", "contains", "greater_than", "less_than", "in", "not_empty"}
)

_MISSING = object()


def resolve_field(context: Context, path: str) -> Any:
    """Look up a dotted path such as ``results.analyze.output.ok`` in a context.

    Roots are ``results``, ``options`` and ``codebase``. Mappings are indexed
    by key, anything else by attribute. Returns None when any segment is
    missing.
    """
    current: Any = {
        "results": context.results,
        "options": context.options,
        "codebase": context.codebase,
    }
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


@dataclass
class ConditionConfig:
    """Declarative predicate over the run context."""

    field: str
    operator: Operator
    value: Any = None

    def evaluate(self, context: Context) -> bool:
        """Evaluate condition against context."""
        actual = resolve_field(context, self.field)

        if self.operator == "not_empty":
            return bool(actual)
        if actual is None:
            return self.operator == "equals" and self.value is None

        if self.operator == "equals":
            return actual == self.value
        elif self.operator == "not_equals":
            return actual != self.value
        elif self.operator == "contains":
            return self.value in actual if isinstance(actual, (str, list, dict)) else False
        elif self.operator == "greater_than":
            return actual > self.value if isinstance(actual, (int, float)) else False
        elif self.operator == "less_than":
            return actual < self.value if isinstance(actual, (int, float)) else False
        elif self.operator == "in":
            return actual in self.value if isinstance(self.value, (list, str)) else False
        return False

    __call__ = evaluate

    @classmethod
    def from_dict(cls, data: dict) -> ConditionConfig:
        return cls(field=data["field"], operator=data["operator"], value=data.get("value"))

    def to_dict(self) -> dict:
        data = {"field": self.field, "operator": self.operator}
        if self.operator != "not_empty":
            data["value"] = self.value
        return data


@dataclass
class Route:
    """One branch of a RouteTable: go to ``goto`` when ``when`` holds."""

    when: ConditionConfig
    goto: str


@dataclass
class RouteTable:
    """Computes the next step from the context; first matching route wins."""

    routes: list[Route] = field(default_factory=list)
    default: str | None = None

    def __call__(self, context: Context) -> str | None:
        for route in self.routes:
            if route.when.evaluate(context):
                return route.goto
        return self.default

    def targets(self) -> list[str]:
        found = [route.goto for route in self.routes]
        if self.default:
            found.append(self.default)
        return found

    @classmethod
    def from_dict(cls, data: dict) -> RouteTable:
        return cls(
            routes=[
                Route(when=ConditionConfig.from_dict(b["when"]), goto=b["goto"])
                for b in data.get("branches", [])
            ],
            default=data.get("default"),
        )

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "branches": [{"when": r.when.to_dict(), "goto": r.goto} for r in self.routes]
        }
        if self.default is not None:
            data["default"] = self.default
        return data


@dataclass(frozen=True)
class StaticNext:
    """Next selector naming a fixed step id."""

    step_id: str

    def resolve(self, context: Context) -> str | None:
        return self.step_id


@dataclass(frozen=True)
class ComputedNext:
    """Next selector computed from the context at resolution time."""

    fn: Callable[[Context], str | None]

    def resolve(self, context: Context) -> str | None:
        return self.fn(context)


NextSelector = StaticNext | ComputedNext


def as_next_selector(value: Any) -> NextSelector | None:
    """Coerce a step id, a callable, or an existing selector into a NextSelector."""
    if value is None or isinstance(value, (StaticNext, ComputedNext)):
        return value
    if isinstance(value, str):
        return StaticNext(value) if value else None
    if callable(value):
        return ComputedNext(value)
    raise TypeError(f"next must be a step id or a callable, got {type(value).__name__}")


@dataclass
class TaskTemplate:
    """Task blueprint bound to a step; materialised with the run input."""

    id: str
    type: str
    description: str = ""
    input: dict[str, Any] = field(default_factory=dict)
    options: dict[str, Any] = field(default_factory=dict)

    def build(self, run_input: dict[str, Any] | None = None) -> Task:
        """Create the Task for one step execution.

        Run input fields override template input fields on collision.
        """
        return Task(
            id=self.id,
            type=self.type,
            description=self.description,
            input={**self.input, **(run_input or {})},
            options=dict(self.options),
        )


@dataclass
class WorkflowStep:
    """A node of a workflow: task template, optional guard, next selector."""

    id: str
    name: str
    description: str
    task: TaskTemplate
    condition: Condition | None = None
    next: NextSelector | None = None

    def __post_init__(self):
        self.next = as_next_selector(self.next)

    @property
    def is_terminal(self) -> bool:
        return self.next is None

    def should_run(self, context: Context) -> bool:
        """True when the step has no guard or its guard holds."""
        return self.condition is None or bool(self.condition(context))

    def resolve_next(self, context: Context) -> str | None:
        if self.next is None:
            return None
        return self.next.resolve(context)


@dataclass
class Workflow:
    """A named workflow definition."""

    id: str
    name: str
    description: str
    steps: list[WorkflowStep] = field(default_factory=list)

    @property
    def entry_step(self) -> WorkflowStep:
        return self.steps[0]

    def get_step(self, step_id: str) -> WorkflowStep | None:
        """Get step by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]

    def validate(self) -> list[str]:
        """Check the definition invariants.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        for attr in ("id", "name", "description"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                errors.append(f"Workflow field '{attr}' must be a non-empty string")

        if not self.steps:
            errors.append("Workflow must have at least one step")
            return errors

        seen: set[str] = set()
        for step in self.steps:
            if not step.id:
                errors.append("Step is missing an id")
            elif step.id in seen:
                errors.append(f"Duplicate step ID: {step.id}")
            seen.add(step.id)

        for step in self.steps:
            for target in _static_targets(step):
                if target not in seen:
                    errors.append(f"Step '{step.id}': next step '{target}' not found")

        return errors


def _static_targets(step: WorkflowStep) -> list[str]:
    """Step ids a step can transition to that are knowable without running it."""
    if isinstance(step.next, StaticNext):
        return [step.next.step_id]
    if isinstance(step.next, ComputedNext) and isinstance(step.next.fn, RouteTable):
        return step.next.fn.targets()
    return []
