"""Code structure commands: test-ratio, dead-zones, directory-entropy, component-creation."""

from typing import List, Optional

import click
import typer
from rich.markup import escape
from rich.table import Table

from ..metrics.components import (
    COMPONENT_CREATION_CONTEXT,
    FRAMEWORK_EXTENSIONS,
    SPIKE_THRESHOLD,
    analyze_component_creation,
)
from ..metrics.dead_zones import DEAD_ZONES_CONTEXT, analyze_dead_zones
from ..metrics.directory_entropy import DIRECTORY_ENTROPY_CONTEXT, analyze_directory_entropy
from ..metrics.test_ratio import TEST_RATIO_CONTEXT, analyze_test_ratio
from ..temporal.windows import format_size
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


@app.command("test-ratio")
def test_ratio(
    ctx: typer.Context,
    path: Optional[List[str]] = path_option(),
):
    """
    Lines of test code per line of source code at HEAD.

    [bold cyan]Examples:[/bold cyan]

      gitallica test-ratio

      gitallica test-ratio --path src/payments
    """
    with handle_errors("test-ratio"):
        session = open_session(ctx, "test-ratio", path, windowed=False)
        report = analyze_test_ratio(session.repo, session.paths)

        console.print("[bold cyan]TEST TO CODE RATIO[/bold cyan]")
        console.print()
        console.print(f"  Test code:    {report.test_loc} lines in {report.test_files} files")
        console.print(f"  Source code:  {report.source_loc} lines in {report.source_files} files")
        console.print(f"  Other:        {report.other_loc} lines in {report.other_files} files")
        console.print()
        if report.source_loc == 0:
            console.print("  Ratio:        [dim]n/a[/dim]")
        else:
            console.print(f"  Ratio:        {report.ratio:.2f}:1")
        console.print(f"  Status:       {styled(report.status)}")
        console.print(f"  {report.recommendation}")
        if report.lines_needed > 0:
            console.print(f"  [dim]{report.lines_needed} more test lines would reach 1:1[/dim]")
        print_context(TEST_RATIO_CONTEXT)


@app.command("dead-zones")
def dead_zones(
    ctx: typer.Context,
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of dead-zone files to show"),
):
    """
    Files at HEAD that nobody has modified for a long time.

    [bold cyan]Examples:[/bold cyan]

      gitallica dead-zones

      gitallica dead-zones --path lib --limit 50
    """
    with handle_errors("dead-zones"):
        session = open_session(ctx, "dead-zones", path, windowed=False)
        thresholds = session.config.thresholds
        report = analyze_dead_zones(
            session.repo,
            session.paths,
            months=thresholds.dead_zone_months,
            medium_months=thresholds.dead_zone_medium_months,
            high_months=thresholds.dead_zone_high_months,
        )

        console.print("[bold cyan]DEAD ZONES[/bold cyan]")
        console.print()
        console.print(f"  Files analyzed: {report.total_files}")
        console.print(f"  Active files:   {report.active_files}")
        console.print(
            f"  Dead zones:     {len(report.dead_zones)} "
            f"({report.dead_zone_percent:.1f}%, untouched for {report.threshold_months}+ months)"
        )

        if not report.dead_zones:
            console.print()
            console.print("[green]No dead zones found.[/green]")
            print_context(DEAD_ZONES_CONTEXT)
            return

        console.print()
        for risk in ("High Risk", "Medium Risk", "Low Risk"):
            console.print(f"  {styled(risk)}: {report.count(risk)}")

        console.print()
        table = Table(show_header=True, pad_edge=True)
        table.add_column("File", min_width=30)
        table.add_column("Last modified")
        table.add_column("Age (months)", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Risk")
        table.add_column("Recommendation")
        for f in report.dead_zones[:limit]:
            table.add_row(
                escape(f.path),
                f"{f.last_modified:%Y-%m-%d}",
                str(f.age_months),
                format_size(f.size),
                styled(f.risk),
                f.recommendation,
            )
        console.print(table)

        hidden = len(report.dead_zones) - limit
        if hidden > 0:
            console.print(f"[dim]... and {hidden} more (use --limit to see more)[/dim]")
        print_context(DEAD_ZONES_CONTEXT)


@app.command("directory-entropy")
def directory_entropy(
    ctx: typer.Context,
    path: Optional[List[str]] = path_option(),
    limit: int = limit_option(10, "Number of directories to show per list"),
):
    """
    Shannon entropy of file types per directory at HEAD.

    [bold cyan]Examples:[/bold cyan]

      gitallica directory-entropy

      gitallica directory-entropy --path src --limit 5
    """
    with handle_errors("directory-entropy"):
        session = open_session(ctx, "directory-entropy", path, windowed=False)
        report = analyze_directory_entropy(session.repo, session.paths)

        if not report.directories:
            console.print("[yellow]No files found in the selected scope.[/yellow]")
            return

        project = report.project_type
        console.print("[bold cyan]DIRECTORY ENTROPY[/bold cyan]")
        console.print()
        console.print(f"  Project type: {project.name} ({project.description})")
        console.print(f"  Directories analyzed: {len(report.directories)}")
        console.print(f"  Average entropy: {report.average_entropy:.2f} bits")

        if report.high:
            console.print()
            console.print("[bold]High-entropy directories:[/bold]")
            table = Table(show_header=True, pad_edge=True)
            table.add_column("Directory", min_width=20)
            table.add_column("Entropy", justify="right")
            table.add_column("Files", justify="right")
            table.add_column("Unexpected", justify="right")
            table.add_column("Level")
            table.add_column("File types")
            table.add_column("Recommendation")
            for d in report.high[:limit]:
                types = ", ".join(f"{ext}: {n}" for ext, n in d.file_types.most_common(5))
                table.add_row(
                    escape(d.path),
                    f"{d.entropy:.2f}",
                    str(d.file_count),
                    str(d.unexpected_files),
                    styled(d.level),
                    escape(types),
                    d.recommendation,
                )
            console.print(table)
        else:
            console.print()
            console.print("[green]No high-entropy directories found.[/green]")

        if report.low:
            console.print()
            console.print("[bold]Well-organized directories:[/bold]")
            for d in report.low[:limit]:
                console.print(f"  {escape(d.path)}: {d.entropy:.2f} bits, {d.file_count} files")

        print_context(DIRECTORY_ENTROPY_CONTEXT)


@app.command("component-creation")
def component_creation(
    ctx: typer.Context,
    last: Optional[str] = last_option(),
    path: Optional[List[str]] = path_option(),
    framework: Optional[str] = typer.Option(
        None,
        "--framework",
        help="Only count components in this language's files",
        click_type=click.Choice(sorted(FRAMEWORK_EXTENSIONS), case_sensitive=False),
    ),
    limit: int = limit_option(10, "Number of component types to show"),
):
    """
    Classes, components and modules introduced over time.

    [bold cyan]Examples:[/bold cyan]

      gitallica component-creation --last 6m

      gitallica component-creation --framework python
    """
    with handle_errors("component-creation"):
        framework = framework.lower() if framework else None
        session = open_session(ctx, "component-creation", path, last)
        report = analyze_component_creation(
            session.repo, session.cutoff, session.paths, framework=framework
        )

        if not report.components:
            console.print("[yellow]No new components found in the selected scope.[/yellow]")
            return

        console.print("[bold cyan]COMPONENT CREATION[/bold cyan]")
        console.print()
        if framework:
            console.print(f"  Framework: {framework}")
        console.print(f"  Components created: {report.total_created}")
        console.print(f"  Months analyzed: {len(report.monthly)}")

        console.print()
        if report.spikes:
            console.print(
                f"[yellow]Creation spikes (more than {SPIKE_THRESHOLD} components in a month):[/yellow]"
            )
            for p in report.spikes:
                console.print(f"  {p.start:%Y-%m}: {p.count} components")
        else:
            console.print("[green]Steady component creation, no monthly spikes.[/green]")

        console.print()
        table = Table(show_header=True, pad_edge=True)
        table.add_column("Component type")
        table.add_column("Created", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("First seen")
        table.add_column("Last seen")
        for c in report.components[:limit]:
            table.add_row(
                c.name,
                str(c.count),
                str(len(c.files)),
                f"{c.first_seen:%Y-%m-%d}" if c.first_seen else "-",
                f"{c.last_seen:%Y-%m-%d}" if c.last_seen else "-",
            )
        console.print(table)
        print_context(COMPONENT_CREATION_CONTEXT)
