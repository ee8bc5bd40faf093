"""Code review worker."""

from __future__ import annotations

from pathlib import PurePath

from codeforge.validation.code_validator import CODE_EXTENSIONS

from .base import Context, Result, Task
from .prompt import PromptWorker, format_file

DEFAULT_CRITERIA = (
    "Code quality and readability",
    "Potential bugs or errors",
    "Security vulnerabilities",
    "Performance issues",
    "Style consistency",
    "Best practices",
)

DEFAULT_MAX_FILES = 5


class CodeReviewWorker(PromptWorker):
    """Reviews files of the codebase and reports issues per file."""

    name = "codeReview"
    description = "Reviews code for quality, bugs and best practices"
    capabilities = (
        "Identify bugs and errors",
        "Suggest improvements",
        "Check for security vulnerabilities",
        "Enforce coding standards",
    )
    action = "Code review"
    max_tokens = 1024

    def files_to_review(self, task: Task, context: Context) -> list[tuple[str, str]]:
        """Explicit ``files``, then ``file``, then the first few code files."""
        files = context.codebase.files
        if task.input.get("files"):
            return [(p, files[p]) for p in task.input["files"] if p in files]

        target = self.target_file(task, context)
        if target:
            return [target]

        limit = task.input.get("max_files", DEFAULT_MAX_FILES)
        code_files = [
            (path, content)
            for path, content in files.items()
            if PurePath(path).suffix in CODE_EXTENSIONS
        ]
        return code_files[:limit]

    def build_prompt(self, path: str, content: str, criteria: list[str] | None) -> str:
        lines = [
            "You are an expert code reviewer. Please review the following code file:\n",
            format_file(path, content),
            "Please analyze the code for the following aspects:",
        ]
        lines.extend(f"- {criterion}" for criterion in criteria or DEFAULT_CRITERIA)
        lines.append(
            "\nFor each issue found, please provide:\n"
            "1. The line number or code snippet where the issue occurs\n"
            "2. A description of the issue\n"
            "3. A suggested fix or improvement\n\n"
            "Format your response as a list of issues, grouped by category. "
            'If no issues are found in a category, state "No issues found".'
        )
        return "\n".join(lines)

    def run(self, task: Task, context: Context) -> Result:
        files = self.files_to_review(task, context)
        if not files:
            return Result.failure("No files to review")

        reviews = []
        for path, content in files:
            prompt = self.build_prompt(path, content, task.input.get("criteria"))
            response = self.generate(prompt, task)
            reviews.append((path, response.content))

        report = "\n\n".join(f"## Review for {path}\n\n{review}" for path, review in reviews)
        return Result.ok(report, files_reviewed=[path for path, _ in files])
