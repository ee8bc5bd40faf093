"""Refactoring worker."""

from __future__ import annotations

from .base import Context, Result, Task
from .fixing import unified_diff
from .prompt import PromptWorker, extract_code, format_file


class RefactoringWorker(PromptWorker):
    """Refactors one file while keeping its behaviour."""

    name = "refactoring"
    description = "Refactors code to improve quality and maintainability"
    capabilities = (
        "Improve readability",
        "Extract functions and classes",
        "Remove duplication",
    )
    action = "Refactoring"
    require_code_generation = True

    def build_prompt(
        self,
        path: str,
        content: str,
        refactoring_type: str | None = None,
        description: str | None = None,
    ) -> str:
        prompt = (
            "You are an expert software developer. "
            "Refactor the following code to improve its quality:\n\n"
        )
        prompt += format_file(path, content) + "\n"
        if refactoring_type:
            prompt += f"Refactoring type: {refactoring_type}\n\n"
        if description:
            prompt += f"Refactoring description: {description}\n\n"
        prompt += (
            "Please refactor the code to improve its:\n"
            "1. Readability\n"
            "2. Maintainability\n"
            "3. Performance\n"
            "4. Adherence to best practices\n\n"
            "Make sure the refactored code maintains the same functionality as the original code.\n"
            "Return ONLY the refactored code without explanations."
        )
        return prompt

    def run(self, task: Task, context: Context) -> Result:
        target = self.target_file(task, context)
        if target is None:
            return Result.failure("File not found")
        path, original = target

        prompt = self.build_prompt(
            path,
            original,
            task.input.get("refactoring_type"),
            task.input.get("description"),
        )
        response = self.generate(prompt, task)
        refactored = extract_code(response.content, first_only=True)

        validation = self.validate(refactored, self.language_for(task, path))
        if not validation.valid:
            return Result.failure(
                f"Refactored code is invalid: {', '.join(validation.errors)}", output=refactored
            )

        return Result.ok(
            {
                "file": path,
                "original_code": original,
                "refactored_code": refactored,
                "diff": unified_diff(path, original, refactored),
            },
            refactoring_type=task.input.get("refactoring_type"),
            **self.response_metadata(response),
        )
