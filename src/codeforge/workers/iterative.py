"""Iterative code generation: generate, validate, regenerate with the errors."""

from __future__ import annotations

import logging

from .base import Context, Result, Task
from .generation import CodeGenerationWorker
from .prompt import extract_code

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 3


class IterativeGenerationWorker(CodeGenerationWorker):
    """Code generation that retries until the code validates.

    Each retry feeds the previous attempt and its validation errors back to
    the model. Gives up after ``max_iterations`` attempts.
    """

    name = "langgraph"
    description = "Iteratively generates and validates code, refining it on errors"
    capabilities = (
        "Generate and validate Python code",
        "Iteratively refine code based on validation errors",
    )
    action = "Iterative generation"
    temperature = 0.1

    def __init__(self, router, validator=None, max_iterations: int = DEFAULT_MAX_ITERATIONS):
        super().__init__(router, validator)
        self.max_iterations = max_iterations

    def language_for(self, task: Task, path: str | None = None) -> str:
        return task.options.get("language") or task.input.get("language") or "python"

    def refine_prompt(self, prompt: str, code: str, errors: list[str]) -> str:
        return (
            f"{prompt}\n\nYour previous attempt was:\n```\n{code}\n```\n\n"
            f"It failed validation with these errors:\n"
            + "\n".join(f"- {error}" for error in errors)
            + "\n\nReturn a corrected version of the complete code."
        )

    def run(self, task: Task, context: Context) -> Result:
        base_prompt = self.build_prompt(task, context)
        language = self.language_for(task, task.input.get("file"))
        prompt = base_prompt
        code = ""
        errors: list[str] = []

        for iteration in range(1, self.max_iterations + 1):
            response = self.generate(prompt, task)
            code = extract_code(response.content, first_only=True)
            validation = self.validate(code, language)
            if validation.valid:
                return Result.ok(code, iterations=iteration, **self.response_metadata(response))

            errors = validation.errors
            logger.debug(
                "Iteration %d/%d of task %s produced invalid code: %s",
                iteration,
                self.max_iterations,
                task.id,
                errors,
            )
            prompt = self.refine_prompt(base_prompt, code, errors)

        return Result.failure(
            f"Code still invalid after {self.max_iterations} iterations: {', '.join(errors)}",
            output=code,
            iterations=self.max_iterations,
        )
