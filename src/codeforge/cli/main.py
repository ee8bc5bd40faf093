"""CodeForge CLI entry point."""

from __future__ import annotations

import typer

from codeforge import __version__

from .commands.analyze import analyze
from .commands.workflow import workflow_app
from .helpers import console, state

app = typer.Typer(
    name="codeforge",
    help="Multi-step workflow orchestration for code automation workers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _print_version(value: bool) -> None:
    if not value:
        return
    console.print(f"[bold cyan]codeforge[/bold cyan] version {__version__}")
    raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """Run multi-step code automation workflows.

    [bold]Examples:[/bold]

        codeforge workflow list
        codeforge workflow run bug-fixing -i file=app.py
        codeforge workflow create triage.yaml
        codeforge analyze .
    """
    state.verbose = verbose


app.add_typer(workflow_app, name="workflow")
app.command()(analyze)


if __name__ == "__main__":
    app()
