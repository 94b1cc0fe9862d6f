"""Root of the gitallica error hierarchy."""

from pathlib import Path
from typing import Dict, Optional


class GitallicaError(Exception):
    """An expected failure that ends a command with exit code 1.

    Attributes:
        message: What went wrong, shown after ``Error:``.
        details: Extra key/value context such as a git return code.
        path: Repository or config file the failure concerns, if any.
        hint: What the user can do about it, shown on its own line.
    """

    hint: Optional[str] = None

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, str]] = None,
        path: Optional[Path] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})
        self.path = path
        if hint is not None:
            self.hint = hint

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
