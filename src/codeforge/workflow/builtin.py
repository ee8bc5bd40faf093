"""Built-in workflows registered unconditionally at startup."""

from __future__ import annotations

from .models import TaskTemplate, Workflow, WorkflowStep


def _step(
    step_id: str,
    name: str,
    description: str,
    task_type: str,
    next_step: str | None = None,
    task_description: str | None = None,
) -> WorkflowStep:
    return WorkflowStep(
        id=step_id,
        name=name,
        description=description,
        task=TaskTemplate(
            id=step_id,
            type=task_type,
            description=task_description or description,
        ),
        next=next_step,
    )


def builtin_workflows() -> list[Workflow]:
    """Fresh copies of the built-in workflow definitions."""
    return [
        Workflow(
            id="code-generation",
            name="Code Generation",
            description="Generate code based on a description",
            steps=[
                _step(
                    "generate-code",
                    "Generate Code",
                    "Generate code based on the description",
                    "code-generation",
                    next_step="review-code",
                ),
                _step(
                    "review-code",
                    "Review Code",
                    "Review the generated code",
                    "code-review",
                    next_step="save-code",
                ),
                _step(
                    "save-code",
                    "Save Code",
                    "Save the generated code to a file",
                    "code-generation",
                ),
            ],
        ),
        Workflow(
            id="bug-fixing",
            name="Bug Fixing",
            description="Fix a bug in the code",
            steps=[
                _step(
                    "analyze-bug",
                    "Analyze Bug",
                    "Analyze the bug to understand its cause",
                    "code-review",
                    next_step="fix-bug",
                ),
                _step(
                    "fix-bug",
                    "Fix Bug",
                    "Fix the bug in the code",
                    "error-fixing",
                    next_step="test-fix",
                ),
                _step("test-fix", "Test Fix", "Test the bug fix", "testing"),
            ],
        ),
        Workflow(
            id="code-refactoring",
            name="Code Refactoring",
            description="Refactor code to improve its quality",
            steps=[
                _step(
                    "analyze-code",
                    "Analyze Code",
                    "Analyze the code to identify areas for improvement",
                    "code-review",
                    next_step="refactor-code",
                ),
                _step(
                    "refactor-code",
                    "Refactor Code",
                    "Refactor the code to improve its quality",
                    "refactoring",
                    next_step="test-refactoring",
                ),
                _step(
                    "test-refactoring",
                    "Test Refactoring",
                    "Test the refactored code",
                    "testing",
                ),
            ],
        ),
        Workflow(
            id="langgraph-code-generation",
            name="LangGraph Code Generation",
            description="Generate and validate Python code using LangGraph",
            steps=[
                _step(
                    "generate-code",
                    "Generate Code",
                    "Generate Python code using LangGraph",
                    "langgraph",
                    next_step="review-code",
                    task_description="Generate Python code based on the description",
                ),
                _step(
                    "review-code",
                    "Review Code",
                    "Review the generated code",
                    "code-review",
                    next_step="save-code",
                ),
                _step(
                    "save-code",
                    "Save Code",
                    "Save the generated code to a file",
                    "code-generation",
                ),
            ],
        ),
    ]
