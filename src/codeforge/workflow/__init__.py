"""Workflow definitions and execution.

Define multi-step workflows in Python or as JSON/YAML files, register them
in a store, and run them step by step through the engine.
"""

from .approval import ApprovalCallback, always_deny, approval_message, auto_approve
from .builtin import builtin_workflows
from .engine import CancellationToken, RunOptions, WorkflowEngine
from .loader import (
    load_workflow_file,
    validate_workflow,
    workflow_from_dict,
    workflow_to_dict,
)
from .models import (
    ComputedNext,
    ConditionConfig,
    Route,
    RouteTable,
    StaticNext,
    TaskTemplate,
    Workflow,
    WorkflowStep,
)
from .results import RunResult, RunState, StepRecord
from .store import LoadReport, WorkflowStore

__all__ = [
    # Models
    "Workflow",
    "WorkflowStep",
    "TaskTemplate",
    "ConditionConfig",
    "Route",
    "RouteTable",
    "StaticNext",
    "ComputedNext",
    # Loading
    "builtin_workflows",
    "load_workflow_file",
    "validate_workflow",
    "workflow_from_dict",
    "workflow_to_dict",
    "LoadReport",
    "WorkflowStore",
    # Execution
    "WorkflowEngine",
    "RunOptions",
    "CancellationToken",
    "RunResult",
    "RunState",
    "StepRecord",
    # Approval
    "ApprovalCallback",
    "approval_message",
    "auto_approve",
    "always_deny",
]
