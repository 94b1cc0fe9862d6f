"""Configuration exceptions: config files, settings, command arguments."""

from pathlib import Path
from typing import Any

from .base import GitallicaError


class ConfigurationError(GitallicaError):
    """Base class for configuration-related errors."""

    pass


class ConfigFileError(ConfigurationError):
    """Raised when a configuration file is missing or cannot be parsed."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Invalid config file: {path}", details={"reason": reason}, path=path)
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class InvalidDurationError(ConfigurationError):
    """Raised when a --last time window cannot be parsed."""

    hint = "Use a number followed by d, m or y, for example 30d, 6m or 1y."

    def __init__(self, value: str, reason: str):
        super().__init__(f"Invalid time window '{value}': {reason}")
        self.value = value
        self.reason = reason
