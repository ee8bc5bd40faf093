"""Identifier checks for workflow files and secret redaction for logs."""

from __future__ import annotations

import re

from codeforge.errors import InvalidDefinitionError

# Workflow ids double as file stems in the workflows directory
SAFE_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
MAX_IDENTIFIER_LENGTH = 128

_REDACTIONS = [
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in (
        (r"\b(?:gsk|hf)_[A-Za-z0-9]{20,}", "[REDACTED_API_KEY]"),
        (r"\bsk-[A-Za-z0-9]{20,}", "[REDACTED_API_KEY]"),
        (r"\bghp_[A-Za-z0-9]{36}", "[REDACTED_GITHUB_TOKEN]"),
        (r"Bearer\s+[A-Za-z0-9._-]+", "Bearer [REDACTED]"),
        (r"(password|api_key)[\"']?\s*[:=]\s*[\"']?[^\"'\s]+", r"\1=[REDACTED]"),
    )
]


def is_safe_identifier(value: str, max_length: int = MAX_IDENTIFIER_LENGTH) -> bool:
    return (
        bool(value)
        and len(value) <= max_length
        and ".." not in value
        and SAFE_IDENTIFIER_PATTERN.match(value) is not None
    )


def validate_identifier(
    value: str,
    name: str = "identifier",
    max_length: int = MAX_IDENTIFIER_LENGTH,
) -> str:
    """Return ``value`` unchanged if it is usable as a file stem.

    Raises:
        InvalidDefinitionError: Naming ``name`` and what is wrong with it
    """
    if not value:
        raise InvalidDefinitionError(f"{name} cannot be empty")
    if len(value) > max_length:
        raise InvalidDefinitionError(f"{name} is longer than {max_length} characters")
    if not is_safe_identifier(value, max_length):
        raise InvalidDefinitionError(f"{name} contains invalid characters: {value!r}")
    return value


def sanitize_log_message(message: str, extra_patterns: list[str] | None = None) -> str:
    """Redact provider keys, tokens and passwords from ``message``.

    ``extra_patterns`` are additional regexes replaced with ``[REDACTED]``.
    """
    for regex, replacement in _REDACTIONS:
        message = regex.sub(replacement, message)
    for pattern in extra_patterns or ():
        message = re.sub(pattern, "[REDACTED]", message, flags=re.IGNORECASE)
    return message
