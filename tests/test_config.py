"""Tests for configuration loading."""

import os
from dataclasses import FrozenInstanceError

import pytest

from gitallica.config import (
    DEFAULT_THRESHOLDS,
    GitallicaConfig,
    ThresholdConfig,
    find_project_config,
    load_config,
)
from gitallica.exceptions import ConfigFileError, ConfigurationError, InvalidConfigError


@pytest.fixture
def empty_home(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in list(os.environ):
        if name.startswith("GITALLICA_"):
            monkeypatch.delenv(name)


class TestThresholdConfig:
    def test_defaults(self):
        t = ThresholdConfig()
        assert t.bus_factor_rules == "team-relative"
        assert (t.branch_healthy_days, t.branch_warning_days, t.branch_critical_days) == (1.0, 3.0, 7.0)
        assert t.dead_zone_months == 12

    def test_rejects_unknown_rules(self):
        with pytest.raises(ValueError, match="bus_factor_rules"):
            ThresholdConfig(bus_factor_rules="strict")

    def test_rejects_unordered_branch_days(self):
        with pytest.raises(ValueError):
            ThresholdConfig(branch_healthy_days=5, branch_warning_days=3)

    def test_rejects_bad_share(self):
        with pytest.raises(ValueError):
            ThresholdConfig(ownership_strong_share=1.5)

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_THRESHOLDS.dead_zone_months = 3


class TestLoadConfig:
    def test_no_files_gives_defaults(self, tmp_path, empty_home):
        config = load_config(cwd=tmp_path, home=empty_home)
        assert config.sources == []
        assert config.thresholds == ThresholdConfig()
        assert config.author_mappings == []

    def test_project_file_is_discovered_from_subdirectory(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("churn:\n  paths: [src]\n  last: 30d\n")
        sub = tmp_path / "a" / "b"
        sub.mkdir(parents=True)

        config = load_config(cwd=sub, home=empty_home)
        assert config.paths_for("churn") == (["src"], "(from config)")
        assert config.last_for("churn") == "30d"
        assert find_project_config(sub) == tmp_path / ".gitallica.yaml"

    def test_explicit_file_overrides_project(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yml").write_text("thresholds:\n  dead_zone_months: 6\n  dead_zone_medium_months: 12\n")
        explicit = tmp_path / "custom.yaml"
        explicit.write_text("thresholds:\n  dead_zone_months: 9\n")

        config = load_config(explicit, cwd=tmp_path, home=empty_home)
        assert config.thresholds.dead_zone_months == 9
        # deep merge keeps keys the explicit file does not set
        assert config.thresholds.dead_zone_medium_months == 12
        assert config.sources == [tmp_path / ".gitallica.yml", explicit]

    def test_missing_explicit_file(self, tmp_path, empty_home):
        with pytest.raises(ConfigFileError):
            load_config(tmp_path / "nope.yaml", cwd=tmp_path, home=empty_home)

    def test_malformed_yaml(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("churn: [unclosed\n")
        with pytest.raises(ConfigFileError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_top_level_must_be_mapping(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigFileError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_empty_file(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("")
        config = load_config(cwd=tmp_path, home=empty_home)
        assert config.sources == [tmp_path / ".gitallica.yaml"]

    def test_unknown_threshold(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("thresholds:\n  nonsense: 1\n")
        with pytest.raises(ConfigurationError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_invalid_threshold_value(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("thresholds:\n  bus_factor_rules: strict\n")
        with pytest.raises(InvalidConfigError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_paths_must_be_strings(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("churn:\n  paths: [1, 2]\n")
        with pytest.raises(InvalidConfigError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_author_mappings(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text(
            "authors:\n"
            "  mappings:\n"
            "    - patterns: [jdoe, john]\n"
            "      canonical: john@acme.io\n"
            "  placeholders: [corp.invalid]\n"
        )
        config = load_config(cwd=tmp_path, home=empty_home)
        normalizer = config.author_normalizer()
        assert normalizer("John Doe", "jd@elsewhere.net") == "john@acme.io"
        assert normalizer("Bot", "bot@corp.invalid") == "bot"

    def test_mapping_without_canonical(self, tmp_path, empty_home):
        (tmp_path / ".gitallica.yaml").write_text("authors:\n  mappings:\n    - patterns: [x]\n")
        with pytest.raises(InvalidConfigError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_home_config_has_lowest_priority(self, tmp_path, empty_home):
        (empty_home / ".gitallica.yaml").write_text("defaults:\n  last: 1y\n  paths: [lib]\n")
        (tmp_path / ".gitallica.yaml").write_text("defaults:\n  last: 6m\n")
        config = load_config(cwd=tmp_path, home=empty_home)
        assert config.default_last == "6m"
        assert config.default_paths == ["lib"]

    def test_env_overrides_file(self, tmp_path, empty_home, monkeypatch):
        (tmp_path / ".gitallica.yaml").write_text("thresholds:\n  bus_factor_rules: team-relative\n")
        monkeypatch.setenv("GITALLICA_BUS_FACTOR_RULES", "flat")
        monkeypatch.setenv("GITALLICA_BRANCH_HEALTHY_DAYS", "2")
        config = load_config(cwd=tmp_path, home=empty_home)
        assert config.thresholds.bus_factor_rules == "flat"
        assert config.thresholds.branch_healthy_days == 2.0

    def test_bad_env_value(self, tmp_path, empty_home, monkeypatch):
        monkeypatch.setenv("GITALLICA_DEAD_ZONE_MONTHS", "many")
        with pytest.raises(InvalidConfigError):
            load_config(cwd=tmp_path, home=empty_home)

    def test_overrides_win(self, tmp_path, empty_home, monkeypatch):
        monkeypatch.setenv("GITALLICA_BUS_FACTOR_RULES", "flat")
        config = load_config(cwd=tmp_path, home=empty_home, bus_factor_rules="team-relative")
        assert config.thresholds.bus_factor_rules == "team-relative"


class TestScopeResolution:
    def test_cli_paths_win(self):
        config = GitallicaConfig(commands={"churn": {"paths": ["src"], "last": None}})
        assert config.paths_for("churn", ["lib"]) == (["lib"], "(from CLI)")

    def test_defaults_used_when_command_has_none(self):
        config = GitallicaConfig(default_paths=["src"])
        assert config.paths_for("bus-factor") == (["src"], "(from defaults)")

    def test_no_filter(self):
        assert GitallicaConfig().paths_for("churn") == ([], "")

    def test_last_precedence(self):
        config = GitallicaConfig(commands={"churn": {"paths": [], "last": "3m"}}, default_last="1y")
        assert config.last_for("churn", "7d") == "7d"
        assert config.last_for("churn") == "3m"
        assert config.last_for("survival") == "1y"
