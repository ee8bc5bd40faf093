"""Workflow commands: list, show, run, create, validate."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from codeforge.errors import CodeForgeError, InvalidDefinitionError
from codeforge.workflow.engine import RunOptions
from codeforge.workflow.loader import load_workflow_file, workflow_to_dict
from codeforge.workflow.models import StaticNext, Workflow
from codeforge.workflow.results import RunResult, RunState

from ..helpers import _parse_cli_variables, console, err_console, get_orchestrator

workflow_app = typer.Typer(help="Manage and run workflows.", no_args_is_help=True)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def list_workflows_table(workflows: list[Workflow]) -> None:
    """Display workflows in a table."""
    table = Table(title="Available Workflows")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Steps", justify="right")

    for wf in workflows:
        table.add_row(wf.id, wf.name, wf.description[:50], str(len(wf.steps)))

    console.print(table)


def _describe_next(step) -> str:
    if step.next is None:
        return "end"
    if isinstance(step.next, StaticNext):
        return step.next.step_id
    return "computed"


def _display_workflow(workflow: Workflow) -> None:
    console.print(
        Panel(
            f"[bold]{workflow.name}[/bold]\n[dim]{workflow.description}[/dim]",
            title=workflow.id,
            border_style="blue",
        )
    )
    table = Table(show_header=True)
    table.add_column("Step", style="cyan")
    table.add_column("Task type")
    table.add_column("Guarded", justify="center")
    table.add_column("Next")
    for step in workflow.steps:
        table.add_row(
            step.id,
            step.task.type,
            "yes" if step.condition is not None else "",
            _describe_next(step),
        )
    console.print(table)


_STATUS_COLORS = {
    RunState.COMPLETED: "green",
    RunState.ABORTED: "red",
    RunState.CANCELLED: "yellow",
}


def _output_run_results(result: RunResult, json_output: bool) -> None:
    """Output workflow execution results."""
    if json_output:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    color = _STATUS_COLORS.get(result.status, "red")
    console.print(f"\n[{color}]Status: {result.status.value}[/{color}]")

    if result.steps:
        console.print("\n[dim]Step Results:[/dim]")
        for record in result.steps:
            icon = "[green]✓[/green]" if record.result.success else "[red]✗[/red]"
            line = f"  {icon} {record.step_name} ({record.duration_ms}ms)"
            if record.result.error:
                line += f": {record.result.error}"
            console.print(line)

    if result.hook_error:
        console.print(f"\n[yellow]Publishing failed:[/yellow] {result.hook_error}")


def _output_validation_errors(errors: list[str], path: Path) -> None:
    console.print(
        Panel(
            "\n".join(f"[red]✗[/red] {e}" for e in errors),
            title=f"Errors in {path}",
            border_style="red",
        )
    )
    console.print("\n[red]✗ Validation failed[/red]")


def _load_definition(path: Path) -> Workflow:
    try:
        return load_workflow_file(path)
    except InvalidDefinitionError as e:
        _output_validation_errors(e.errors or [e.message], path)
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@workflow_app.command("list")
def list_workflows(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List all registered workflows."""
    workflows = get_orchestrator().list_workflows()

    if json_output:
        print(
            json.dumps(
                [
                    {
                        "id": w.id,
                        "name": w.name,
                        "description": w.description,
                        "steps": len(w.steps),
                    }
                    for w in workflows
                ],
                indent=2,
            )
        )
        return

    if not workflows:
        console.print("[yellow]No workflows found[/yellow]")
        return

    list_workflows_table(workflows)


@workflow_app.command()
def show(
    workflow_id: str = typer.Argument(..., help="Workflow ID"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show the steps of a workflow."""
    try:
        workflow = get_orchestrator().get_workflow(workflow_id)
    except CodeForgeError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    if json_output:
        try:
            print(json.dumps(workflow_to_dict(workflow), indent=2))
        except InvalidDefinitionError as e:
            console.print(f"[red]{e.message}[/red]")
            raise typer.Exit(1)
        return

    _display_workflow(workflow)


@workflow_app.command()
def run(
    workflow_id: str = typer.Argument(..., help="Workflow ID"),
    input_vars: list[str] = typer.Option(
        [], "--input", "-i", help="Run input in key=value format (can be repeated)"
    ),
    directory: Path | None = typer.Option(
        None, "--dir", "-d", help="Codebase directory (defaults to the current directory)"
    ),
    commit: bool | None = typer.Option(
        None, "--commit/--no-commit", help="Commit and push after a completed run"
    ),
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
    approve: bool | None = typer.Option(
        None, "--approve/--no-approve", help="Ask before continuing past a failed step"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Continue past failed steps without asking"
    ),
    strict: bool = typer.Option(False, "--strict", help="Fail on unknown next step ids"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output results as JSON"),
):
    """Run a workflow."""
    orchestrator = get_orchestrator(approve_all=yes)
    options = RunOptions(
        codebase_dir=directory,
        commit_on_success=commit,
        commit_message=message,
        require_approval=approve,
        strict_transitions=strict or None,
    )

    try:
        result = orchestrator.run_workflow(workflow_id, _parse_cli_variables(input_vars), options)
    except CodeForgeError as e:
        (err_console if json_output else console).print(
            f"\n[red]Execution failed:[/red] {e.message}"
        )
        if e.run_result is not None:
            _output_run_results(e.run_result, json_output)
        raise typer.Exit(1)

    _output_run_results(result, json_output)
    if result.status != RunState.COMPLETED:
        raise typer.Exit(1)


@workflow_app.command()
def create(
    workflow_file: Path = typer.Argument(..., help="Workflow definition file", exists=True),
):
    """Register a workflow definition and save it to the workflows directory."""
    workflow = _load_definition(workflow_file)
    orchestrator = get_orchestrator()
    try:
        orchestrator.create_workflow(workflow)
    except CodeForgeError as e:
        console.print(f"[red]Could not create workflow:[/red] {e.message}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Created workflow:[/green] {workflow.id}")


@workflow_app.command()
def validate(
    workflow_file: Path = typer.Argument(..., help="Workflow definition file", exists=True),
):
    """Validate a workflow definition file."""
    workflow = _load_definition(workflow_file)
    console.print(
        f"[green]✓ Workflow is valid:[/green] {workflow.id} ({len(workflow.steps)} steps)"
    )
