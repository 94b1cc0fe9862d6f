"""health-check: aggregate the core metrics into one score."""

from typing import List, Optional

import typer
from rich.markup import escape

from ..metrics.health import SEVERITY_MARKERS, run_health_check
from ..temporal.windows import expand_time_window
from . import app
from ._common import console, handle_errors, last_option, open_session, path_option, styled

TOP_PRIORITIES = 3


@app.command("health-check")
def health_check(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
):
    """
    Run churn, test ratio, bus factor, dead zones and commit size checks together.

    [bold cyan]Examples:[/bold cyan]

      gitallica health-check

      gitallica health-check --last 90d --path src
    """
    with handle_errors("health-check"):
        session = open_session(ctx, "health-check", path, last)
        report = run_health_check(
            session.repo,
            session.cutoff,
            session.paths,
            thresholds=session.config.thresholds,
        )

        console.print("[bold cyan]REPOSITORY HEALTH CHECK[/bold cyan]")
        console.print()
        console.print(f"  Repository: {escape(str(session.repo.root))}")
        console.print(f"  Time window: {expand_time_window(session.scope.last)}")
        console.print(f"  Total issues: {report.total}")
        console.print(
            f"  Health score: [bold]{report.health_score}/100[/bold] ({styled(report.health_label)})"
        )
        console.print()
        console.print(report.summary())

        if not report.issues:
            return

        for category, issues in report.by_category().items():
            console.print()
            console.print(f"[bold]{category}[/bold]")
            for issue in issues:
                marker = SEVERITY_MARKERS.get(issue.severity, "•")
                console.print(f"  {marker} {styled(issue.severity)} {escape(issue.description)}")
                if issue.details:
                    console.print(f"     [dim]{escape(issue.details)}[/dim]")
                console.print(f"     → {escape(issue.recommendation)}")

        console.print()
        console.print("[bold]Top priorities:[/bold]")
        for i, issue in enumerate(report.top(TOP_PRIORITIES), start=1):
            console.print(f"  {i}. {escape(f'[{issue.metric}]')} {escape(issue.description)}", highlight=False)
