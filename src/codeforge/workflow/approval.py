"""Approval callbacks for the failed-step gate.

An approval callback receives the gate message and returns True to continue
the run or False to abort it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

ApprovalCallback = Callable[[str], bool]


def approval_message(step_name: str) -> str:
    return f"Step {step_name} failed. Do you want to continue the workflow?"


def auto_approve(message: str) -> bool:
    """Log the request and continue."""
    logger.info("Approval requested (auto-approved): %s", message)
    return True


def always_deny(message: str) -> bool:
    """Log the request and abort."""
    logger.info("Approval requested (denied): %s", message)
    return False
