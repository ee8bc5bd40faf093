"""Shared machinery for model-backed workers.

A prompt worker builds a prompt from the task and the relevant files of the
codebase snapshot, sends it through the model router, pulls code out of the
reply and validates it.
"""

from __future__ import annotations

import logging
import re
from abc import abstractmethod
from typing import Any

from codeforge.providers.base import CompletionRequest, CompletionResponse, ProviderError
from codeforge.providers.router import ModelRouter
from codeforge.validation.code_validator import CodeValidator, ValidationResult, detect_language

from .base import Context, Result, Task, Worker

logger = logging.getLogger(__name__)

_CODE_BLOCK = re.compile(r"```(?:[\w+-]+)?\n(.*?)```", re.DOTALL)

# Keyword search stops after this many matching files
MAX_KEYWORD_FILES = 3


def extract_code(text: str, first_only: bool = False) -> str:
    """Return the fenced code blocks of a model reply, or the reply itself."""
    blocks = _CODE_BLOCK.findall(text)
    if blocks and first_only:
        return blocks[0].rstrip("\n")
    if blocks:
        return "\n\n".join(block.rstrip("\n") for block in blocks)
    return text.strip()


def relevant_files(task_input: dict[str, Any], context: Context) -> list[tuple[str, str]]:
    """Pick the snapshot files a task refers to.

    Uses ``file`` and ``related_files`` first. When neither matches, falls
    back to files whose path or content mentions one of ``keywords``.
    """
    files = context.codebase.files
    found: list[tuple[str, str]] = []

    target = task_input.get("file")
    if target and target in files:
        found.append((target, files[target]))

    for path in task_input.get("related_files") or []:
        if path in files and path != target:
            found.append((path, files[path]))

    keywords = task_input.get("keywords")
    if not found and keywords:
        if isinstance(keywords, str):
            keywords = [keywords]
        for path, content in files.items():
            if any(k in content or k in path for k in keywords):
                found.append((path, content))
                if len(found) >= MAX_KEYWORD_FILES:
                    break

    return found


def format_file(path: str, content: str) -> str:
    return f"File: {path}\n```\n{content}\n```\n"


class PromptWorker(Worker):
    """Base class for workers that delegate to a language model."""

    # Human readable action used in error messages, e.g. "Code generation"
    action: str = "Task"

    temperature: float = 0.3
    max_tokens: int = 2048
    require_code_generation: bool = False
    require_fast_response: bool = False

    def __init__(self, router: ModelRouter, validator: CodeValidator | None = None):
        self.router = router
        self.validator = validator or CodeValidator()

    def execute(self, task: Task, context: Context) -> Result:
        try:
            return self.run(task, context)
        except ProviderError as e:
            logger.warning("%s failed for task %s: %s", self.action, task.id, e)
            return Result.failure(f"{self.action} failed: {e}")

    @abstractmethod
    def run(self, task: Task, context: Context) -> Result:
        """Do the work. Provider errors are turned into failed Results by execute()."""

    def generate(self, prompt: str, task: Task) -> CompletionResponse:
        request = CompletionRequest(
            prompt=prompt,
            temperature=task.options.get("temperature", self.temperature),
            max_tokens=task.options.get("max_tokens", self.max_tokens),
            preferred_provider=task.options.get("provider"),
            require_code_generation=self.require_code_generation,
            require_fast_response=self.require_fast_response,
            metadata={"task_id": task.id, "worker": self.name},
        )
        return self.router.complete(request)

    def language_for(self, task: Task, path: str | None = None) -> str:
        return (
            task.options.get("language")
            or task.input.get("language")
            or detect_language(path)
        )

    def validate(self, code: str, language: str) -> ValidationResult:
        return self.validator.validate(code, language)

    def target_file(self, task: Task, context: Context) -> tuple[str, str] | None:
        """The snapshot file named by the task's ``file`` input, if present."""
        path = task.input.get("file") or context.options.get("current_file")
        if path and path in context.codebase.files:
            return path, context.codebase.files[path]
        return None

    @staticmethod
    def response_metadata(response: CompletionResponse, **extra: Any) -> dict[str, Any]:
        return {"model": response.model, "provider": response.provider, **extra}
