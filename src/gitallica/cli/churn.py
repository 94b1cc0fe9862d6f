"""Code stability commands: churn, churn-files and survival."""

from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..logging_config import setup_logging
from ..metrics.churn import CHURN_CONTEXT, STATUS_HINTS, analyze_churn
from ..metrics.churn_files import CHURN_FILES_CONTEXT, aggregate_directories, analyze_file_churn
from ..metrics.survival import NO_LINES_MESSAGE, SURVIVAL_CONTEXT, analyze_survival
from . import app
from ._common import (
    console,
    handle_errors,
    last_option,
    limit_option,
    open_session,
    path_option,
    print_context,
    styled,
)


@app.command()
def churn(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
):
    """
    Lines added and deleted relative to the current size of the codebase.

    [bold cyan]Examples:[/bold cyan]

      gitallica churn --last 30d

      gitallica churn --path src --path lib
    """
    with handle_errors("churn"):
        session = open_session(ctx, "churn", path, last)
        report = analyze_churn(session.repo, session.cutoff, session.paths)

        console.print("[bold cyan]CODE CHURN[/bold cyan]")
        console.print()
        console.print(f"  Additions:     {report.additions}")
        console.print(f"  Deletions:     {report.deletions}")
        console.print(f"  Total LOC:     {report.total_loc}")
        if report.total_loc == 0:
            console.print("  Churn:         [dim]n/a (no lines of code in scope)[/dim]")
        else:
            console.print(f"  Churn:         {report.churn_percent:.2f}%")
        hint = STATUS_HINTS.get(report.status, "")
        console.print(f"  Status:        {styled(report.status)} [dim]({hint})[/dim]")
        print_context(CHURN_CONTEXT)


@app.command("churn-files")
def churn_files(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of files or directories to show"),
    directories: bool = typer.Option(
        False, "--directories", help="Aggregate churn by directory instead of by file"
    ),
):
    """
    Files (or directories) with the highest churn.

    [bold cyan]Examples:[/bold cyan]

      gitallica churn-files --last 90d --limit 20

      gitallica churn-files --directories
    """
    with handle_errors("churn-files"):
        session = open_session(ctx, "churn-files", path, last)
        items = analyze_file_churn(session.repo, session.cutoff, session.paths)
        if directories:
            items = aggregate_directories(items)

        if not items:
            console.print("[yellow]No file changes found in the selected scope.[/yellow]")
            return

        unit = "directories" if directories else "files"
        console.print(f"[bold cyan]TOP CHURNING {unit.upper()}[/bold cyan] (showing {min(limit, len(items))} of {len(items)})")
        console.print()

        table = Table(show_header=True, pad_edge=True)
        table.add_column("Directory" if directories else "File", min_width=30)
        table.add_column("Added", justify="right")
        table.add_column("Deleted", justify="right")
        table.add_column("LOC", justify="right")
        table.add_column("Churn", justify="right")
        table.add_column("Status")
        if directories:
            table.add_column("Files", justify="right")

        for item in items[:limit]:
            row = [
                escape(item.path),
                str(item.additions),
                str(item.deletions),
                str(item.total_loc),
                f"{item.churn_percent:.1f}%",
                styled(item.status),
            ]
            if directories:
                row.append(str(item.file_count))
            table.add_row(*row)

        console.print(table)
        print_context(CHURN_FILES_CONTEXT)


@app.command()
def survival(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    debug: bool = typer.Option(False, "--debug", help="Log every commit and file examined"),
):
    """
    How many of the lines added in a window are still present at HEAD.

    [bold cyan]Examples:[/bold cyan]

      gitallica survival --last 6m
    """
    if debug:
        state = ctx.obj or {}
        setup_logging(verbose=True, log_file=state.get("log_file"))

    with handle_errors("survival"):
        session = open_session(ctx, "survival", path, last)
        report = analyze_survival(session.repo, session.cutoff, session.paths)

        if report.added == 0:
            console.print(NO_LINES_MESSAGE)
            return

        console.print("[bold cyan]CODE SURVIVAL[/bold cyan]")
        console.print()
        console.print(f"  Lines added:    {report.added}")
        console.print(f"  Still present:  {report.survived}")
        console.print(f"  Survival rate:  {report.rate:.2f}%")
        print_context(SURVIVAL_CONTEXT)
