"""Shared CLI helpers."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..config import GitallicaConfig, load_config
from ..exceptions import GitallicaError
from ..logging_config import get_logger
from ..temporal.models import Scope
from ..temporal.repository import GitRepository
from ..temporal.windows import expand_time_window, parse_duration, title_case

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)


@dataclass
class Session:
    """Everything a command needs once flags and config are resolved."""

    config: GitallicaConfig
    repo: GitRepository
    scope: Scope

    @property
    def paths(self) -> list[str]:
        return self.scope.paths

    @property
    def cutoff(self) -> Optional[datetime]:
        return self.scope.cutoff


def last_option(help_text: str = "Time window to analyze (e.g. 30d, 6m, 1y)"):
    return typer.Option(None, "--last", help=help_text)


def path_option():
    return typer.Option(
        None, "--path", help="Limit analysis to a path (can be given multiple times)"
    )


def limit_option(default: int = 10, help_text: str = "Number of rows to show"):
    return typer.Option(default, "--limit", help=help_text, min=0)


def print_scope(scope: Scope) -> None:
    err_console.print(f"=== {title_case(scope.command.replace('-', ' '))} Analysis Scope ===", highlight=False)
    err_console.print(f"Time window: {expand_time_window(scope.last)}", markup=False, highlight=False)
    if scope.paths:
        text = ", ".join(scope.paths)
        if scope.paths_source:
            text = f"{text} {scope.paths_source}"
        err_console.print(f"Path filter: {text}", markup=False, highlight=False)
    else:
        err_console.print("Path filter: all files", highlight=False)
    err_console.print()


def open_session(
    ctx: typer.Context,
    command: str,
    cli_paths: Optional[List[str]] = None,
    cli_last: Optional[str] = None,
    default_last: Optional[str] = None,
    windowed: bool = True,
) -> Session:
    """Load config, open the repository and announce the analysis scope.

    Raises:
        GitallicaError: on bad config, a bad --last value or a missing repository
    """
    state = ctx.obj or {}
    repo_path = Path(state.get("repo") or Path.cwd())

    config = load_config(state.get("config"), cwd=Path.cwd())
    for source in config.sources:
        err_console.print(f"Using config file: {source}", markup=False, highlight=False)

    repo = GitRepository(repo_path, authors=config.author_normalizer())
    repo.head()

    paths, source = config.paths_for(command, cli_paths)
    last = (config.last_for(command, cli_last) or default_last) if windowed else None
    scope = Scope(
        command=command,
        paths=paths,
        paths_source=source,
        last=last,
        cutoff=parse_duration(last) if last else None,
    )
    print_scope(scope)
    return Session(config=config, repo=repo, scope=scope)


@contextmanager
def handle_errors(command: str) -> Iterator[None]:
    """Turn failures into an error message and a non-zero exit code."""
    try:
        yield
    except typer.Exit:
        raise
    except GitallicaError as e:
        logger.debug(f"{command} failed: {e.__class__.__name__}: {e}")
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        if e.hint:
            err_console.print(f"[dim]{escape(e.hint)}[/dim]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        logger.info("Analysis interrupted by user")
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.exception(f"Unexpected error during {command}")
        err_console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def print_context(text: str) -> None:
    console.print()
    console.print(f"[dim]Context: {escape(text)}[/dim]")


_LABEL_STYLES = {
    "Critical": "bold red",
    "High": "red",
    "High Risk": "red",
    "Overwhelming": "red",
    "Poor": "red",
    "Warning": "yellow",
    "Medium": "yellow",
    "Medium Risk": "yellow",
    "Risky": "yellow",
    "Complex": "yellow",
    "Moderate": "yellow",
    "Caution": "yellow",
    "Low Risk": "cyan",
    "Low": "green",
    "Healthy": "green",
    "Excellent": "green",
    "Elite": "green",
    "Good": "green",
    "Simple": "green",
    "Active": "green",
}


def styled(label: str, style: Optional[str] = None) -> str:
    """Classification label wrapped in rich markup; Low counts as safe unless `style` says otherwise."""
    style = style or _LABEL_STYLES.get(label, "dim")
    return f"[{style}]{escape(label)}[/{style}]"
