"""Syntax checks for generated code.

Python is compiled without executing it and JSON is parsed. Languages
without a checker are accepted as valid.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import PurePath

logger = logging.getLogger(__name__)

LANGUAGE_BY_EXTENSION = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".json": "json",
    ".rb": "ruby",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
}

CODE_EXTENSIONS = frozenset(ext for ext in LANGUAGE_BY_EXTENSION if ext != ".json")


def detect_language(path: str | None, default: str = "javascript") -> str:
    """Guess a language from a file name's extension."""
    if not path:
        return default
    return LANGUAGE_BY_EXTENSION.get(PurePath(path).suffix.lower(), default)


@dataclass
class ValidationResult:
    """Outcome of validating a code snippet."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"valid": self.valid, "errors": list(self.errors)}


class CodeValidator:
    """Validates code snippets by language."""

    def validate(self, code: str, language: str) -> ValidationResult:
        language = (language or "").lower()
        if language == "python":
            return self._validate_python(code)
        if language == "json":
            return self._validate_json(code)
        return ValidationResult(valid=True)

    def _validate_python(self, code: str) -> ValidationResult:
        try:
            compile(code, "<generated>", "exec")
        except SyntaxError as e:
            return ValidationResult(valid=False, errors=[f"Line {e.lineno}: {e.msg}"])
        except ValueError as e:
            # null bytes in source
            return ValidationResult(valid=False, errors=[str(e)])
        return ValidationResult(valid=True)

    def _validate_json(self, code: str) -> ValidationResult:
        try:
            json.loads(code)
        except json.JSONDecodeError as e:
            return ValidationResult(valid=False, errors=[f"Line {e.lineno}: {e.msg}"])
        return ValidationResult(valid=True)
