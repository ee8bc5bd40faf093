"""Code generation worker."""

from __future__ import annotations

from .base import Context, Result, Task
from .prompt import PromptWorker, extract_code, format_file, relevant_files

INSTRUCTIONS = """
Please generate the code according to the requirements. Ensure the code is:
1. Well-structured and follows best practices
2. Properly commented
3. Handles edge cases appropriately
4. Compatible with the existing codebase

Return ONLY the code without explanations. The code should be ready to use without modifications."""


class CodeGenerationWorker(PromptWorker):
    """Generates code from a natural-language description."""

    name = "codeGeneration"
    description = "Generates code based on natural language descriptions"
    capabilities = (
        "Generate new functions",
        "Create new files",
        "Implement features based on specifications",
        "Complete partial code",
    )
    action = "Code generation"
    temperature = 0.2
    require_code_generation = True

    def build_prompt(self, task: Task, context: Context) -> str:
        parts = [
            "You are an expert software developer. Generate code based on the "
            f"following description:\n\n{task.description}\n"
        ]
        if task.input.get("requirements"):
            parts.append(f"Requirements: {task.input['requirements']}\n")
        if task.input.get("language"):
            parts.append(f"Language: {task.input['language']}")
        if task.input.get("framework"):
            parts.append(f"Framework: {task.input['framework']}")

        files = relevant_files(task.input, context)
        if files:
            parts.append("\nHere are some relevant files from the codebase for context:\n")
            parts.extend(format_file(path, content) for path, content in files)

        parts.append(INSTRUCTIONS)
        return "\n".join(parts)

    def run(self, task: Task, context: Context) -> Result:
        response = self.generate(self.build_prompt(task, context), task)
        code = extract_code(response.content)

        validation = self.validate(code, self.language_for(task, task.input.get("file")))
        if not validation.valid:
            return Result.failure(
                f"Generated code is invalid: {', '.join(validation.errors)}", output=code
            )
        return Result.ok(code, **self.response_metadata(response))
