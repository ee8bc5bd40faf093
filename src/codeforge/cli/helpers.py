"""Shared helpers for CLI modules: orchestrator factory, parsing, prompts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.prompt import Confirm

if TYPE_CHECKING:
    from codeforge.orchestrator import Orchestrator

console = Console()
# Prompts and diagnostics, kept off stdout so --json output stays parseable
err_console = Console(stderr=True)


@dataclass
class CLIState:
    """Global options set by the top-level callback."""

    verbose: bool = False


state = CLIState()


def get_orchestrator(approve_all: bool = False) -> Orchestrator:
    """Build the orchestrator from settings, with logging configured."""
    from codeforge.config import configure_logging, get_settings
    from codeforge.orchestrator import Orchestrator
    from codeforge.workflow.approval import auto_approve

    settings = get_settings()
    configure_logging(
        level="DEBUG" if state.verbose else settings.log_level,
        format=settings.log_format,
        sanitize_logs=settings.sanitize_logs,
    )
    return Orchestrator.from_settings(
        settings,
        approval_callback=auto_approve if approve_all else confirm_approval,
    )


def confirm_approval(message: str) -> bool:
    """Ask on the terminal whether a run should continue past a failed step."""
    return Confirm.ask(f"[yellow]{message}[/yellow]", console=err_console, default=True)


def _parse_cli_variables(var: list[str]) -> dict:
    """Parse ``key=value`` pairs; the value keeps any further '=' signs."""
    variables = {}
    for item in var:
        key, sep, value = item.partition("=")
        if not sep or not key:
            console.print(f"[red]Invalid input format: {item}[/red]")
            console.print("Use: --input key=value")
            raise typer.Exit(1)
        variables[key] = value
    return variables
