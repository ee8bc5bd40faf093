"""CodeForge utility modules."""

from codeforge.utils.validation import (
    is_safe_identifier,
    sanitize_log_message,
    validate_identifier,
)

__all__ = [
    "is_safe_identifier",
    "sanitize_log_message",
    "validate_identifier",
]
