"""Configuration loading and management for gitallica.

Configuration sources are merged in priority order (lowest to highest):
    1. Defaults (defined in GitallicaConfig / ThresholdConfig)
    2. Home config (~/.gitallica.yaml or ~/.gitallica.yml)
    3. Project config (nearest .gitallica.yaml/.yml walking up from the cwd)
    4. Explicit config file (--config)
    5. Environment variables (GITALLICA_* prefix, thresholds only)
    6. CLI overrides

Example file::

    defaults:
      paths: [src]
    churn:
      paths: [src/core, src/api]
      last: 6m
    authors:
      mappings:
        - patterns: [jdoe, john]
          canonical: john@example.org
      placeholders: [corp.invalid]
    thresholds:
      bus_factor_rules: flat
      branch_healthy_days: 2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

import yaml

from .exceptions import ConfigFileError, ConfigurationError, InvalidConfigError
from .temporal.authors import AuthorMapping, AuthorNormalizer

BusFactorRules = Literal["team-relative", "flat"]

CONFIG_NAMES = (".gitallica.yaml", ".gitallica.yml")

# Top-level sections that are not per-command blocks.
_RESERVED_SECTIONS = frozenset({"defaults", "authors", "thresholds"})


@dataclass(frozen=True)
class ThresholdConfig:
    """Tunable classification thresholds.

    Attributes:
        bus_factor_rules: "team-relative" scales the healthy minimum with
            team size (max(4, contributors // 4)); "flat" uses fixed bands
        branch_healthy_days / branch_warning_days / branch_critical_days:
            branch age bands for long-lived-branches
        ownership_strong_share: top-owner share counted as strong ownership
        ownership_max_contributors: contributor count above which a file is Critical
        dead_zone_months: age at which a file becomes a dead zone
        dead_zone_medium_months / dead_zone_high_months: dead-zone risk bands
        new_project_days: health-check skips dead zones for younger repositories
    """

    bus_factor_rules: BusFactorRules = "team-relative"

    # Healthy branch age also appears as 2 days in some trunk-based guides.
    branch_healthy_days: float = 1.0
    branch_warning_days: float = 3.0
    branch_critical_days: float = 7.0

    ownership_strong_share: float = 0.80
    ownership_max_contributors: int = 9

    dead_zone_months: int = 12
    dead_zone_medium_months: int = 24
    dead_zone_high_months: int = 36

    new_project_days: int = 90

    def __post_init__(self) -> None:
        """Validate threshold configuration."""
        if self.bus_factor_rules not in ("team-relative", "flat"):
            raise ValueError("bus_factor_rules must be 'team-relative' or 'flat'")

        if not 0 <= self.branch_healthy_days <= self.branch_warning_days <= self.branch_critical_days:
            raise ValueError(
                "branch thresholds must satisfy 0 <= healthy <= warning <= critical days"
            )

        if not 0.0 < self.ownership_strong_share <= 1.0:
            raise ValueError("ownership_strong_share must be in (0.0, 1.0]")
        if self.ownership_max_contributors < 1:
            raise ValueError("ownership_max_contributors must be at least 1")

        if not 0 < self.dead_zone_months <= self.dead_zone_medium_months <= self.dead_zone_high_months:
            raise ValueError(
                "dead zone thresholds must satisfy 0 < months <= medium <= high"
            )

        if self.new_project_days < 0:
            raise ValueError("new_project_days must be non-negative")


DEFAULT_THRESHOLDS = ThresholdConfig()


@dataclass(frozen=True)
class GitallicaConfig:
    """Resolved configuration for one invocation.

    Attributes:
        commands: per-command sections keyed by command name ("churn", ...)
        default_paths: `defaults.paths`, used when a command has none
        default_last: `defaults.last`, used when neither CLI nor command sets one
        author_mappings: identity remapping applied before normalization
        placeholders: extra placeholder email fragments
        thresholds: classification knobs
        sources: config files that were loaded, lowest priority first
    """

    commands: dict[str, dict[str, Any]] = field(default_factory=dict)
    default_paths: list[str] = field(default_factory=list)
    default_last: Optional[str] = None
    author_mappings: list[AuthorMapping] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    sources: list[Path] = field(default_factory=list)

    def paths_for(self, command: str, cli_paths: Optional[list[str]] = None) -> tuple[list[str], str]:
        """Path filters for `command` and where they came from.

        Returns:
            (paths, source) where source is "(from CLI)", "(from config)",
            "(from defaults)" or "" when no filter applies
        """
        if cli_paths:
            return list(cli_paths), "(from CLI)"
        section_paths = self.commands.get(command, {}).get("paths") or []
        if section_paths:
            return list(section_paths), "(from config)"
        if self.default_paths:
            return list(self.default_paths), "(from defaults)"
        return [], ""

    def last_for(self, command: str, cli_last: Optional[str] = None) -> Optional[str]:
        if cli_last:
            return cli_last
        return self.commands.get(command, {}).get("last") or self.default_last

    def author_normalizer(self) -> AuthorNormalizer:
        return AuthorNormalizer(self.author_mappings, self.placeholders)


def load_config(
    config_file: Optional[Path] = None,
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
    **overrides: Any,
) -> GitallicaConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        cwd: Directory to start the project-file search from (default: cwd)
        home: Home directory (default: Path.home())
        **overrides: Threshold overrides, typically from CLI flags

    Returns:
        Validated GitallicaConfig instance

    Raises:
        ConfigFileError: If a config file is missing (explicit only) or malformed
        InvalidConfigError: If a value has the wrong shape
    """
    merged: dict[str, Any] = {}
    sources: list[Path] = []

    candidates: list[Path] = []
    home_config = _first_existing(home or Path.home())
    if home_config is not None:
        candidates.append(home_config)
    project_config = find_project_config(cwd or Path.cwd())
    if project_config is not None:
        candidates.append(project_config)

    if config_file is not None:
        config_file = Path(config_file).expanduser()
        if not config_file.is_file():
            raise ConfigFileError(config_file, "file not found")
        candidates.append(config_file)

    seen: set[Path] = set()
    for path in candidates:
        resolved = path.resolve()
        if resolved in seen:
            continue
        seen.add(resolved)
        merged = _deep_merge(merged, _load_yaml_file(path))
        sources.append(path)

    thresholds_dict = dict(_section(merged, "thresholds"))
    thresholds_dict.update(_load_env_vars())
    thresholds_dict.update({k: v for k, v in overrides.items() if v is not None})

    try:
        thresholds = ThresholdConfig(**thresholds_dict)
    except TypeError as e:
        raise ConfigurationError(f"Invalid thresholds config: {e}")
    except ValueError as e:
        raise InvalidConfigError("thresholds", thresholds_dict, str(e))

    defaults = _section(merged, "defaults")
    authors = _section(merged, "authors")

    commands = {
        name: {
            "paths": _string_list(body.get("paths"), f"{name}.paths"),
            "last": _optional_string(body.get("last"), f"{name}.last"),
        }
        for name, body in merged.items()
        if name not in _RESERVED_SECTIONS and isinstance(body, dict)
    }

    return GitallicaConfig(
        commands=commands,
        default_paths=_string_list(defaults.get("paths"), "defaults.paths"),
        default_last=_optional_string(defaults.get("last"), "defaults.last"),
        author_mappings=_author_mappings(authors.get("mappings")),
        placeholders=_string_list(authors.get("placeholders"), "authors.placeholders"),
        thresholds=thresholds,
        sources=sources,
    )


def find_project_config(start: Path) -> Optional[Path]:
    """Nearest .gitallica.yaml/.yml in `start` or any of its parents."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        found = _first_existing(directory)
        if found is not None:
            return found
    return None


def _first_existing(directory: Path) -> Optional[Path]:
    for name in CONFIG_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _load_yaml_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigFileError(path, str(e))
    except yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(path, "top-level value must be a mapping")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _section(merged: dict[str, Any], name: str) -> dict[str, Any]:
    value = merged.get(name) or {}
    if not isinstance(value, dict):
        raise InvalidConfigError(name, value, "must be a mapping")
    return value


def _string_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidConfigError(key, value, "must be a list of strings")
    return [v for v in value if v.strip()]


def _optional_string(value: Any, key: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, (str, int)):
        raise InvalidConfigError(key, value, "must be a string such as '30d'")
    return str(value)


def _author_mappings(value: Any) -> list[AuthorMapping]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidConfigError("authors.mappings", value, "must be a list")

    mappings = []
    for entry in value:
        if not isinstance(entry, dict) or "canonical" not in entry:
            raise InvalidConfigError(
                "authors.mappings", entry, "each entry needs 'patterns' and 'canonical'"
            )
        patterns = _string_list(entry.get("patterns"), "authors.mappings.patterns")
        mappings.append(AuthorMapping(patterns=tuple(patterns), canonical=str(entry["canonical"])))
    return mappings


def _load_env_vars() -> dict[str, Any]:
    """Load threshold overrides from GITALLICA_* environment variables.

    Example: GITALLICA_BUS_FACTOR_RULES=flat, GITALLICA_DEAD_ZONE_MONTHS=18.

    Returns:
        Dict of field_name -> parsed_value for any GITALLICA_* vars found.
    """
    type_hints = get_type_hints(ThresholdConfig)

    result: dict[str, Any] = {}
    for field_name in ThresholdConfig.__dataclass_fields__:
        env_key = f"GITALLICA_{field_name.upper()}"
        env_value = os.environ.get(env_key)
        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if type_hint is int:
        return int(value)
    if type_hint is float:
        return float(value)
    if type_hint is str or origin is Literal:
        return value.strip()
    return None
