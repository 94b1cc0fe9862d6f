"""Development practice commands: commit-size, high-risk-commits, commit-cadence."""

from typing import List, Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..metrics.cadence import CADENCE_CONTEXT, analyze_cadence
from ..metrics.commit_size import (
    COMMIT_SIZE_CONTEXT,
    RISK_LEVELS,
    analyze_commit_sizes,
    filter_by_min_risk,
    risk_distribution,
)
from ..metrics.high_risk import HIGH_RISK_CONTEXT, analyze_high_risk_commits
from ..temporal.models import TimePeriod
from ..temporal.windows import PERIODS, first_line
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

RECENT_PERIODS = 5
MESSAGE_WIDTH = 50


@app.command("commit-size")
def commit_size(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of commits to show"),
    min_risk: Optional[str] = typer.Option(
        None,
        "--min-risk",
        help="Only show commits at or above this risk level",
        click_type=click.Choice([level.lower() for level in RISK_LEVELS], case_sensitive=False),
    ),
    summary: bool = typer.Option(False, "--summary", help="Only print the risk distribution"),
):
    """
    Commit size risk from lines and files changed per commit.

    [bold cyan]Examples:[/bold cyan]

      gitallica commit-size --last 30d

      gitallica commit-size --min-risk high --limit 20

      gitallica commit-size --summary
    """
    with handle_errors("commit-size"):
        session = open_session(ctx, "commit-size", path, last)
        commits = analyze_commit_sizes(session.repo, session.cutoff, session.paths)

        if not commits:
            console.print("[yellow]No commits found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]COMMIT SIZE[/bold cyan]")
        console.print()
        console.print(f"  Commits analyzed: {len(commits)}")
        for level, n in risk_distribution(commits).items():
            console.print(f"  {styled(level)}: {n} ({n / len(commits) * 100:.1f}%)")

        if summary:
            print_context(COMMIT_SIZE_CONTEXT)
            return

        shown = filter_by_min_risk(commits, min_risk or "")
        console.print()
        if not shown:
            console.print(f"[green]No commits at or above {min_risk} risk.[/green]")
            print_context(COMMIT_SIZE_CONTEXT)
            return

        table = Table(show_header=True, pad_edge=True)
        table.add_column("Commit")
        table.add_column("Date")
        table.add_column("Author")
        table.add_column("Lines", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("Score", justify="right")
        table.add_column("Risk")
        table.add_column("Message")

        for c in shown[:limit]:
            table.add_row(
                c.hash[:8],
                f"{c.date:%Y-%m-%d}",
                escape(c.author),
                f"+{c.additions}/-{c.deletions}",
                str(c.files_changed),
                str(c.score),
                styled(c.risk),
                escape(first_line(c.message, MESSAGE_WIDTH)),
            )
        console.print(table)
        print_context(COMMIT_SIZE_CONTEXT)


@app.command("high-risk-commits")
def high_risk_commits(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of risky commits to show"),
):
    """
    Monster commits that touch too many lines or files.

    [bold cyan]Examples:[/bold cyan]

      gitallica high-risk-commits --last 90d
    """
    with handle_errors("high-risk-commits"):
        session = open_session(ctx, "high-risk-commits", path, last)
        report = analyze_high_risk_commits(session.repo, session.cutoff, session.paths)

        if not report.commits:
            console.print("[yellow]No commits found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]HIGH-RISK COMMITS[/bold cyan]")
        console.print()
        console.print(f"  Total commits: {report.total}")
        console.print(f"  Average lines changed: {report.average_lines:.1f}")
        console.print(f"  Average files changed: {report.average_files:.1f}")
        largest = report.largest
        if largest is not None:
            console.print(
                f"  Largest commit: {largest.short_hash} "
                f"({largest.lines_changed} lines, {largest.files_changed} files)"
            )
        console.print()
        for level in ("Critical", "High", "Moderate", "Low"):
            console.print(f"  {styled(level)}: {report.count(level)}")

        risky = report.risky
        if risky:
            console.print()
            table = Table(show_header=True, pad_edge=True)
            table.add_column("Commit")
            table.add_column("Date")
            table.add_column("Author")
            table.add_column("Lines", justify="right")
            table.add_column("Files", justify="right")
            table.add_column("Risk")
            table.add_column("Reason")
            table.add_column("Message")
            for c in risky[:limit]:
                table.add_row(
                    c.short_hash,
                    f"{c.date:%Y-%m-%d}",
                    escape(c.author),
                    str(c.lines_changed),
                    str(c.files_changed),
                    styled(c.risk),
                    c.reason,
                    escape(first_line(c.message, MESSAGE_WIDTH)),
                )
            console.print(table)

        console.print()
        console.print(report.advice())
        print_context(HIGH_RISK_CONTEXT)


def _period_label(period: TimePeriod, unit: str) -> str:
    if unit == "month":
        return f"{period.start:%Y-%m}"
    return f"{period.start:%Y-%m-%d}"


@app.command("commit-cadence")
def commit_cadence(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    period: str = typer.Option(
        "week",
        "--period",
        help="Bucket size: day, week or month",
        click_type=click.Choice(list(PERIODS), case_sensitive=False),
    ),
):
    """
    Commits per period with trend, spike and dip detection.

    [bold cyan]Examples:[/bold cyan]

      gitallica commit-cadence --last 6m

      gitallica commit-cadence --period month
    """
    with handle_errors("commit-cadence"):
        period = period.lower()
        session = open_session(ctx, "commit-cadence", path, last)
        report = analyze_cadence(session.repo, session.cutoff, session.paths, period=period)

        if not report.periods:
            console.print("[yellow]No commits found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]COMMIT CADENCE[/bold cyan]")
        console.print()
        console.print(f"  Periods analyzed: {len(report.periods)} ({period})")
        console.print(f"  Total commits: {report.total_commits}")
        console.print(f"  Average per {period}: {report.average:.1f}")
        console.print(f"  Trend: {report.trend} (slope {report.trend_strength:.2f})")
        console.print(f"  Sustainability: {styled(report.sustainability)}")

        console.print()
        console.print(f"[bold]Recent {period}s:[/bold]")
        for p in report.periods[-RECENT_PERIODS:]:
            console.print(f"  {_period_label(p, period)}: {p.count} commits")

        if report.spikes:
            console.print()
            console.print("[bold]Spikes:[/bold]")
            for p in report.spikes:
                console.print(
                    f"  {_period_label(p, period)}: {p.count} commits "
                    f"({p.ratio:.1f}x median, {styled(p.severity or '')} severity)"
                )
        if report.dips:
            console.print()
            console.print("[bold]Dips:[/bold]")
            for p in report.dips:
                console.print(
                    f"  {_period_label(p, period)}: {p.count} commits "
                    f"({p.ratio:.1f}x median, {styled(p.severity or '', 'yellow')} severity)"
                )

        console.print()
        console.print("[bold]Recommendations:[/bold]")
        for advice in report.recommendations():
            console.print(f"  • {advice}")
        print_context(CADENCE_CONTEXT)
