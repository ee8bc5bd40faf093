"""Codebase analysis command."""

from __future__ import annotations

from collections import Counter
from pathlib import Path, PurePath

import typer
from rich.table import Table

from codeforge.codebase.snapshot import FileSystemSnapshotProvider
from codeforge.config import get_settings

from ..helpers import console


def analyze(
    directory: Path = typer.Argument(
        Path("."), help="Codebase directory", exists=True, file_okay=False
    ),
):
    """Show the source files a workflow run would see."""
    provider = FileSystemSnapshotProvider(max_file_bytes=get_settings().max_file_bytes)
    snapshot = provider.analyze(str(directory))

    if not snapshot.files:
        console.print(f"[yellow]No source files found in {directory}[/yellow]")
        return

    counts = Counter(PurePath(path).suffix for path in snapshot.files)
    table = Table(title=f"Codebase: {snapshot.root_dir}")
    table.add_column("Extension", style="cyan")
    table.add_column("Files", justify="right")
    for suffix, count in counts.most_common():
        table.add_row(suffix, str(count))
    console.print(table)
    console.print(f"\n[bold]{len(snapshot.files)}[/bold] files analyzed")
