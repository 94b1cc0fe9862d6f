"""CLI entry point that registers all subcommands."""

from pathlib import Path
from typing import Optional

import typer

from ..logging_config import setup_logging
from ._common import console

app = typer.Typer(
    name="gitallica",
    help="gitallica - code health metrics from git history",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        from .. import __version__

        console.print(f"[bold cyan]gitallica[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)


@app.callback()
def callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (YAML), merged over the nearest .gitallica.yaml above the working directory",
        file_okay=True,
        dir_okay=False,
    ),
    repo: Optional[Path] = typer.Option(
        None,
        "-C",
        "--repo",
        help="Repository to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit", callback=_version_callback, is_eager=True
    ),
):
    """
    Read-only statistics over a repository's commit history.

    [bold cyan]Examples:[/bold cyan]

      gitallica churn --last 30d

      gitallica bus-factor --path src

      gitallica -C ../other-repo health-check
    """
    setup_logging(verbose=verbose, quiet=quiet, log_file=str(log_file) if log_file else None)
    ctx.ensure_object(dict)
    ctx.obj.update(
        config=config,
        repo=repo,
        verbose=verbose,
        quiet=quiet,
        log_file=str(log_file) if log_file else None,
    )


def main() -> None:
    app()


# Import subcommands to register them
from .churn import churn as _churn, churn_files as _churn_files, survival as _survival  # noqa: F401, E402
from .knowledge import (  # noqa: F401, E402
    bus_factor as _bus_factor,
    onboarding_footprint as _onboarding_footprint,
    ownership_clarity as _ownership_clarity,
)
from .commits import (  # noqa: F401, E402
    commit_cadence as _commit_cadence,
    commit_size as _commit_size,
    high_risk_commits as _high_risk_commits,
)
from .delivery import change_lead_time as _change_lead_time, long_lived_branches as _branches  # noqa: F401, E402
from .structure import (  # noqa: F401, E402
    component_creation as _component_creation,
    dead_zones as _dead_zones,
    directory_entropy as _directory_entropy,
    test_ratio as _test_ratio,
)
from .health import health_check as _health_check  # noqa: F401, E402
