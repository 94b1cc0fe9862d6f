"""Exception hierarchy for gitallica."""

from .base import GitallicaError
from .config import (
    ConfigFileError,
    ConfigurationError,
    InvalidConfigError,
    InvalidDurationError,
)
from .repository import (
    EmptyRepositoryError,
    GitCommandError,
    NotARepositoryError,
    RepositoryError,
)

__all__ = [
    "GitallicaError",
    "ConfigurationError",
    "ConfigFileError",
    "InvalidConfigError",
    "InvalidDurationError",
    "RepositoryError",
    "NotARepositoryError",
    "EmptyRepositoryError",
    "GitCommandError",
]
