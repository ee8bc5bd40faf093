"""Error fixing worker."""

from __future__ import annotations

import difflib

from .base import Context, Result, Task
from .prompt import PromptWorker, extract_code, format_file


def unified_diff(path: str, before: str, after: str) -> str:
    return "".join(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )


class ErrorFixingWorker(PromptWorker):
    """Fixes a reported error in one file."""

    name = "errorFixing"
    description = "Fixes errors and bugs in existing code"
    capabilities = (
        "Fix syntax errors",
        "Resolve runtime errors",
        "Debug logical errors",
    )
    action = "Error fixing"
    temperature = 0.2

    def build_prompt(self, path: str, content: str, error: str | None) -> str:
        prompt = "You are an expert software developer. Fix the error in the following code:\n\n"
        prompt += format_file(path, content) + "\n"
        if error:
            prompt += f"Error details: {error}\n\n"
        prompt += (
            "Please fix the code to resolve the error. Provide the complete fixed code, "
            "not just the changes.\n"
            "Make minimal changes to fix the error while preserving the original functionality.\n"
            "Return ONLY the fixed code without explanations."
        )
        return prompt

    def run(self, task: Task, context: Context) -> Result:
        target = self.target_file(task, context)
        if target is None:
            return Result.failure("File not found")
        path, original = target

        response = self.generate(self.build_prompt(path, original, task.input.get("error")), task)
        fixed = extract_code(response.content, first_only=True)

        validation = self.validate(fixed, self.language_for(task, path))
        if not validation.valid:
            return Result.failure(
                f"Fixed code is invalid: {', '.join(validation.errors)}", output=fixed
            )

        return Result.ok(
            {
                "file": path,
                "original_code": original,
                "fixed_code": fixed,
                "diff": unified_diff(path, original, fixed),
            },
            **self.response_metadata(response),
        )
