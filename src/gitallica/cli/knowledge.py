"""Knowledge management commands: bus-factor, ownership-clarity, onboarding-footprint."""

from typing import List, Optional

import typer
from rich.markup import escape
from rich.table import Table

from ..metrics.bus_factor import BUS_FACTOR_CONTEXT, analyze_bus_factor
from ..metrics.onboarding import DEFAULT_COMMIT_LIMIT, ONBOARDING_CONTEXT, analyze_onboarding
from ..metrics.ownership import DEFAULT_WINDOW, OWNERSHIP_CONTEXT, analyze_ownership
from ..temporal.windows import expand_time_window
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

MAX_FILES_PER_CONTRIBUTOR = 5


@app.command("bus-factor")
def bus_factor(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of directories to show"),
    depth: int = typer.Option(1, "--depth", help="Directory depth to group by", min=1),
):
    """
    Knowledge concentration per directory, from lines added by each author.

    [bold cyan]Examples:[/bold cyan]

      gitallica bus-factor

      gitallica bus-factor --depth 2 --last 1y
    """
    with handle_errors("bus-factor"):
        session = open_session(ctx, "bus-factor", path, last)
        rules = session.config.thresholds.bus_factor_rules
        report = analyze_bus_factor(
            session.repo, session.cutoff, session.paths, depth=depth, rules=rules
        )

        if not report.directories:
            console.print("[yellow]No contributions found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]BUS FACTOR[/bold cyan]")
        console.print()
        console.print(
            f"  Overall bus factor: [bold]{report.overall_bus_factor}[/bold] "
            f"({styled(report.overall_risk)}) across {report.total_contributors} contributors"
        )
        console.print(
            f"  Directories: {len(report.directories)} analyzed, "
            f"{len(report.risky)} at risk, {len(report.healthy)} healthy"
        )
        console.print(f"  [dim]Rules: {rules}[/dim]")
        console.print()

        table = Table(show_header=True, pad_edge=True)
        table.add_column("Directory", min_width=20)
        table.add_column("Bus factor", justify="right")
        table.add_column("Risk")
        table.add_column("Contributors", justify="right")
        table.add_column("Top contributors")

        for d in report.directories[:limit]:
            top = ", ".join(f"{escape(c.author)} ({c.percentage:.0f}%)" for c in d.top_contributors)
            table.add_row(
                escape(d.path),
                str(d.bus_factor),
                styled(d.risk_level),
                str(d.contributors),
                top,
            )
        console.print(table)

        if report.risky:
            console.print()
            console.print("[bold]Recommendations:[/bold]")
            for d in report.risky[:limit]:
                console.print(f"  • {escape(d.path)}: {d.recommendation}")

        print_context(BUS_FACTOR_CONTEXT)


@app.command("ownership-clarity")
def ownership_clarity(
    ctx: typer.Context,
    last: Optional[str] = last_option("Time window to analyze (default: 1y)"),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of files to show"),
):
    """
    How clearly each file is owned, from commit counts per author.

    [bold cyan]Examples:[/bold cyan]

      gitallica ownership-clarity

      gitallica ownership-clarity --last 6m --path src/api
    """
    with handle_errors("ownership-clarity"):
        session = open_session(ctx, "ownership-clarity", path, last, default_last=DEFAULT_WINDOW)
        thresholds = session.config.thresholds
        report = analyze_ownership(
            session.repo,
            session.cutoff,
            session.paths,
            strong_share=thresholds.ownership_strong_share,
            max_contributors=thresholds.ownership_max_contributors,
        )

        if not report.files:
            console.print("[yellow]No file changes found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]OWNERSHIP CLARITY[/bold cyan]")
        console.print()
        total = len(report.files)
        for status in ("Critical", "Warning", "Caution", "Healthy"):
            n = report.count(status)
            console.print(f"  {styled(status)}: {n} files ({n / total * 100:.1f}%)")
        console.print()

        table = Table(show_header=True, pad_edge=True)
        table.add_column("File", min_width=30)
        table.add_column("Top owner")
        table.add_column("Share", justify="right")
        table.add_column("Contributors", justify="right")
        table.add_column("Status")
        table.add_column("Recommendation")

        for f in report.files[:limit]:
            table.add_row(
                escape(f.path),
                escape(f.top_contributor),
                f"{f.top_share * 100:.0f}%",
                str(f.contributors),
                styled(f.status),
                f.recommendation,
            )
        console.print(table)
        print_context(OWNERSHIP_CONTEXT)


@app.command("onboarding-footprint")
def onboarding_footprint(
    ctx: typer.Context,
    last: Optional[str] = last_option("Only contributors whose first commit is in this window"),
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of contributors to show"),
    commit_limit: int = typer.Option(
        DEFAULT_COMMIT_LIMIT, "--commit-limit", help="First N commits to examine per contributor", min=1
    ),
):
    """
    How many files new contributors touch in their first commits.

    [bold cyan]Examples:[/bold cyan]

      gitallica onboarding-footprint --last 6m

      gitallica onboarding-footprint --commit-limit 10
    """
    with handle_errors("onboarding-footprint"):
        session = open_session(ctx, "onboarding-footprint", path, last)
        report = analyze_onboarding(
            session.repo, session.cutoff, session.paths, commit_limit=commit_limit
        )

        if not report.contributors:
            console.print(
                f"[yellow]No new contributors found ({expand_time_window(session.scope.last)}).[/yellow]"
            )
            return

        console.print("[bold cyan]ONBOARDING FOOTPRINT[/bold cyan]")
        console.print()
        console.print(f"  Contributors analyzed: {report.total}")
        console.print(
            f"  Average files touched in first {commit_limit} commits: {report.average_files:.1f}"
        )
        console.print()
        console.print("[bold]Onboarding complexity:[/bold]")
        for status, n in report.distribution().items():
            console.print(f"  {styled(status)}: {n} contributors ({n / report.total * 100:.1f}%)")

        console.print()
        console.print(f"[bold]Recent contributors[/bold] (showing {min(limit, report.total)}):")
        for i, c in enumerate(report.contributors[:limit], start=1):
            console.print()
            console.print(f"{i}. {escape(c.author)} - {styled(c.status)}")
            console.print(f"   First commit: {c.first_commit_at:%Y-%m-%d}")
            console.print(f"   Files touched: {c.files_touched} (in first {c.commits_analyzed} commits)")
            console.print(f"   Recommendation: {c.recommendation}")
            if c.files:
                shown = ", ".join(escape(p) for p in c.files[:MAX_FILES_PER_CONTRIBUTOR])
                more = len(c.files) - MAX_FILES_PER_CONTRIBUTOR
                suffix = f" [dim](+{more} more)[/dim]" if more > 0 else ""
                console.print(f"   Files: {shown}{suffix}")

        if report.common_files:
            console.print()
            console.print("[bold]Most common entry points:[/bold]")
            for f in report.common_files[:limit]:
                console.print(
                    f"  {escape(f.path)}: {f.contributors} contributors ({f.percentage:.1f}%)"
                )

        print_context(ONBOARDING_CONTEXT)
