"""Test generation worker."""

from __future__ import annotations

from pathlib import PurePosixPath

from .base import Context, Result, Task
from .prompt import PromptWorker, extract_code, format_file

FRAMEWORK_BY_EXTENSION = {
    ".js": "jest",
    ".ts": "jest",
    ".jsx": "jest",
    ".tsx": "jest",
    ".py": "pytest",
    ".rb": "rspec",
    ".java": "junit",
    ".cs": "nunit",
    ".go": "go test",
    ".rs": "cargo test",
    ".php": "phpunit",
}


def suggested_test_path(path: str, test_type: str = "unit") -> str:
    """Where the generated tests for ``path`` should live."""
    source = PurePosixPath(path)
    if source.suffix == ".py":
        prefix = "test" if test_type == "unit" else f"test_{test_type}"
        return str(source.with_name(f"{prefix}_{source.name}"))
    marker = "test" if test_type == "unit" else f"{test_type}.test"
    return str(source.with_name(f"{source.stem}.{marker}{source.suffix}"))


class TestingWorker(PromptWorker):
    """Generates tests for one source file."""

    __test__ = False

    name = "testing"
    description = "Generates tests for existing code"
    capabilities = (
        "Generate unit tests",
        "Generate integration tests",
        "Suggest a test framework",
    )
    action = "Test generation"
    require_code_generation = True

    def build_prompt(
        self, path: str, content: str, test_type: str, framework: str | None
    ) -> str:
        prompt = (
            f"You are an expert software tester. Generate {test_type} tests "
            "for the following code:\n\n"
        )
        prompt += format_file(path, content) + "\n"
        if framework:
            prompt += f"Test framework: {framework}\n\n"
        else:
            suggested = FRAMEWORK_BY_EXTENSION.get(PurePosixPath(path).suffix, "jest")
            prompt += f"Suggested test framework: {suggested}\n\n"
        prompt += (
            f"Please generate comprehensive {test_type} tests for the code. The tests should:\n"
            "1. Cover all functions and methods in the code\n"
            "2. Include test cases for normal operation, edge cases, and error conditions\n"
            "3. Use appropriate assertions to verify the expected behavior\n"
            "4. Follow best practices for the chosen test framework\n"
            "5. Be well-structured and maintainable\n\n"
            "Return ONLY the test code without explanations."
        )
        return prompt

    def run(self, task: Task, context: Context) -> Result:
        target = self.target_file(task, context)
        if target is None:
            return Result.failure("File not found")
        path, content = target

        test_type = task.input.get("test_type", "unit")
        framework = task.input.get("test_framework")
        response = self.generate(self.build_prompt(path, content, test_type, framework), task)
        test_code = extract_code(response.content, first_only=True)

        validation = self.validate(test_code, self.language_for(task, path))
        if not validation.valid:
            return Result.failure(
                f"Generated test code is invalid: {', '.join(validation.errors)}",
                output=test_code,
            )

        return Result.ok(
            {
                "source_file": path,
                "test_file": suggested_test_path(path, test_type),
                "test_code": test_code,
            },
            test_type=test_type,
            test_framework=framework,
            **self.response_metadata(response),
        )
