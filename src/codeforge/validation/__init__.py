"""Generated code validation."""

from .code_validator import CODE_EXTENSIONS, CodeValidator, ValidationResult, detect_language

__all__ = ["CODE_EXTENSIONS", "CodeValidator", "ValidationResult", "detect_language"]
