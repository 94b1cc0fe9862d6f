"""Repository exceptions: opening repositories and running git."""

from pathlib import Path
from typing import Sequence

from .base import GitallicaError


class RepositoryError(GitallicaError):
    """Base class for repository access errors."""

    pass


class NotARepositoryError(RepositoryError):
    """Raised when the target directory is not inside a git work tree."""

    hint = "Run gitallica inside a git work tree or point -C at one."

    def __init__(self, path: Path):
        super().__init__(f"Not a git repository: {path}", path=path)


class EmptyRepositoryError(RepositoryError):
    """Raised when HEAD cannot be resolved (no commits yet)."""

    hint = "Make a first commit, or check out a branch that has commits."

    def __init__(self, path: Path):
        super().__init__(f"Repository has no commits: {path}", path=path)


class GitCommandError(RepositoryError):
    """Raised when a git subprocess exits with an error."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = ""):
        details = {"returncode": str(returncode)}
        if stderr:
            details["stderr"] = stderr.strip()
        super().__init__(f"{self.format_command(args)} failed", details=details)
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr

    @staticmethod
    def format_command(args: Sequence[str]) -> str:
        return " ".join(["git", *args])

    @property
    def command(self) -> str:
        return self.format_command(self.args_list)
