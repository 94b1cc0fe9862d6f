"""DORA commands: change-lead-time and long-lived-branches."""

from typing import List, Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..metrics.branches import BRANCHES_CONTEXT, analyze_branches
from ..metrics.lead_time import LEAD_TIME_CONTEXT, METHODS, CommitLeadTime, analyze_lead_time
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


def format_hours(hours: float) -> str:
    if hours < 1:
        return f"{hours * 60:.0f}m"
    if hours < 48:
        return f"{hours:.1f}h"
    return f"{hours / 24:.1f}d"


def _lead_time_table(title: str, commits: List[CommitLeadTime]) -> Table:
    table = Table(title=title, title_justify="left", show_header=True, pad_edge=True)
    table.add_column("Commit")
    table.add_column("Author")
    table.add_column("Authored")
    table.add_column("Integrated")
    table.add_column("Lead time", justify="right")
    table.add_column("Class")
    for c in commits:
        table.add_row(
            c.short_hash,
            escape(c.author),
            f"{c.authored_at:%Y-%m-%d %H:%M}",
            f"{c.integrated_at:%Y-%m-%d %H:%M}",
            format_hours(c.hours),
            styled(c.classification, "red" if c.classification == "Low" else None),
        )
    return table


@app.command("change-lead-time")
def change_lead_time(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    method: str = typer.Option(
        "merge",
        "--method",
        help="How integration is detected: merge (mainline merges) or tag (releases)",
        click_type=click.Choice(list(METHODS), case_sensitive=False),
    ),
    limit: int = limit_option(5, "Number of fastest and slowest commits to show"),
):
    """
    DORA lead time for changes: from authoring a commit to its integration.

    [bold cyan]Examples:[/bold cyan]

      gitallica change-lead-time --last 90d

      gitallica change-lead-time --method tag
    """
    with handle_errors("change-lead-time"):
        method = method.lower()
        session = open_session(ctx, "change-lead-time", path, last)
        report = analyze_lead_time(session.repo, session.cutoff, session.paths, method=method)

        if not report.commits:
            if method == "tag":
                console.print("[yellow]No tagged commits found in the selected scope.[/yellow]")
            else:
                console.print("[yellow]No commits found in the selected scope.[/yellow]")
            return

        level_style = "red" if report.level == "Low" else None
        console.print("[bold cyan]CHANGE LEAD TIME[/bold cyan]")
        console.print()
        console.print(f"  Method: {method}")
        console.print(f"  Commits analyzed: {report.total}")
        console.print(f"  Average: {format_hours(report.average_hours)}")
        console.print(f"  Median: {format_hours(report.median_hours)}")
        console.print(f"  95th percentile: {format_hours(report.p95_hours)}")
        console.print(f"  Performance level: {styled(report.level, level_style)}")
        console.print()
        for level, n in report.distribution.items():
            console.print(f"  {level}: {n} ({n / report.total * 100:.1f}%)")

        console.print()
        console.print(_lead_time_table("Fastest", report.fastest(limit)))
        console.print()
        console.print(_lead_time_table("Slowest", report.slowest(limit)))

        console.print()
        console.print("[bold]Recommendations:[/bold]")
        for advice in report.recommendations():
            console.print(f"  • {advice}")
        print_context(LEAD_TIME_CONTEXT)


@app.command("long-lived-branches")
def long_lived_branches(
    ctx: typer.Context,
    last: Optional[str] = last_option("Only branches with a tip commit in this window"),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of risky branches to show"),
    show_merged: bool = typer.Option(
        False, "--show-merged", help="Include branches already merged into HEAD"
    ),
):
    """
    Branch lifespans and trunk-based development compliance.

    [bold cyan]Examples:[/bold cyan]

      gitallica long-lived-branches

      gitallica long-lived-branches --show-merged --limit 20
    """
    with handle_errors("long-lived-branches"):
        session = open_session(ctx, "long-lived-branches", path, last)
        thresholds = session.config.thresholds
        report = analyze_branches(
            session.repo,
            session.cutoff,
            session.paths,
            show_merged=show_merged,
            healthy_days=thresholds.branch_healthy_days,
            warning_days=thresholds.branch_warning_days,
            critical_days=thresholds.branch_critical_days,
        )

        console.print("[bold cyan]LONG-LIVED BRANCHES[/bold cyan]")
        console.print()
        console.print(f"  Total branches analyzed: {report.total}")
        if not report.branches:
            console.print("  No branches found for analysis.")
            return

        console.print(f"  Average branch age: {report.average_age:.1f} days")
        console.print()
        console.print("[bold]Branch risk distribution:[/bold]")
        console.print(
            f"  Healthy (<{thresholds.branch_healthy_days:g} days): {report.count('Healthy')}"
        )
        console.print(
            f"  Warning ({thresholds.branch_healthy_days:g}-{thresholds.branch_warning_days:g} days): "
            f"{report.count('Warning')}"
        )
        console.print(
            f"  Risky ({thresholds.branch_warning_days:g}-{thresholds.branch_critical_days:g} days): "
            f"{report.count('Risky')}"
        )
        console.print(
            f"  Critical (>={thresholds.branch_critical_days:g} days): {report.count('Critical')}"
        )
        console.print()
        console.print(f"Trunk-based development compliance: {styled(report.compliance)}")
        console.print(f"  {report.healthy_percent:.1f}% of branches are healthy")

        oldest = report.oldest
        if oldest is not None:
            console.print()
            console.print(f"Oldest branch: {escape(oldest.name)} ({oldest.age_days:.1f} days old)")
            console.print(f"  Last commit by: {escape(oldest.last_author)}")
            console.print(f"  Last commit: {oldest.last_commit_at:%Y-%m-%d %H:%M}")

        risky = report.risky
        if risky:
            console.print()
            table = Table(show_header=True, pad_edge=True)
            table.add_column("Branch")
            table.add_column("Age (days)", justify="right")
            table.add_column("Risk")
            table.add_column("Commits", justify="right")
            table.add_column("Last author")
            table.add_column("Last commit")
            for b in risky[:limit]:
                table.add_row(
                    escape(b.name),
                    f"{b.age_days:.1f}",
                    styled(b.risk),
                    str(b.commit_count),
                    escape(b.last_author),
                    f"{b.last_commit_at:%Y-%m-%d}",
                )
            console.print(table)

        advice = report.recommendations()
        if len(risky) > limit:
            advice.append(
                f"{len(risky) - limit} additional risky branches not shown - use --limit to see more"
            )
        if advice:
            console.print()
            console.print("[bold]Recommendations:[/bold]")
            for line in advice:
                console.print(f"  • {line}")
        print_context(BRANCHES_CONTEXT)
