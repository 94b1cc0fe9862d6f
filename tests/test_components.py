"""Tests for new component creation tracking."""

from collections import Counter
from datetime import datetime, timezone

import pytest

from gitallica.metrics.components import (
    analyze_component_creation,
    detect_components,
    matches_framework,
    monthly_series,
)
from gitallica.temporal.repository import GitRepository


class TestDetectComponents:
    def test_python_classes(self):
        text = "class Foo:\n    pass\nclass Bar(Base):\n    x = 1\n"
        assert detect_components("pkg/models.py", text) == {"python-class": 2}

    def test_react_component(self):
        text = "export class App extends Component {}\n"
        assert detect_components("web/App.tsx", text) == {"javascript-class": 1, "react-component": 1}

    def test_go_types(self):
        text = "type Server struct {}\ntype Store interface {}\n"
        assert detect_components("server.go", text) == {"go-struct": 1, "go-interface": 1}

    def test_rails(self):
        text = "class UsersController < ApplicationController\nend\n"
        assert detect_components("app/users_controller.rb", text) == {"ruby-controller": 1}

    def test_unsupported_extension(self):
        assert detect_components("notes.txt", "class Foo:\n") == {}


def test_matches_framework():
    assert matches_framework("a.go", None)
    assert matches_framework("a.tsx", "javascript")
    assert not matches_framework("a.py", "go")


def test_monthly_series_zero_fills():
    jan = datetime(2024, 1, 1, tzinfo=timezone.utc)
    apr = datetime(2024, 4, 1, tzinfo=timezone.utc)
    series = monthly_series(Counter({jan: 2, apr: 12}))
    assert [p.count for p in series] == [2, 0, 0, 12]
    assert monthly_series(Counter()) == []


class TestAnalyzeComponentCreation:
    def test_counts_added_definitions(self, git_repo):
        git_repo.commit("init", {"README.md": "x\n"}, date="2024-01-01T00:00:00+00:00")
        git_repo.commit(
            "models",
            {"app/models.py": "class User:\n    pass\nclass Team:\n    pass\n"},
            date="2024-02-10T00:00:00+00:00",
        )
        git_repo.commit("server", {"cmd/server.go": "type Server struct {}\n"}, date="2024-03-05T00:00:00+00:00")

        report = analyze_component_creation(GitRepository(git_repo.root))
        assert report.total_created == 3
        assert [(c.component_type, c.count) for c in report.components] == [
            ("python-class", 2),
            ("go-struct", 1),
        ]
        assert [p.count for p in report.monthly] == [2, 1]
        assert report.spikes == []

        python = report.components[0]
        assert python.files == {"app/models.py"}
        assert python.name == "Python Class"

    def test_root_commit_is_skipped(self, git_repo):
        git_repo.commit("init", {"a.py": "class A:\n    pass\n"})
        report = analyze_component_creation(GitRepository(git_repo.root))
        assert report.total_created == 0

    def test_framework_filter(self, git_repo):
        git_repo.commit("init", {"README.md": "x\n"}, date="2024-01-01T00:00:00+00:00")
        git_repo.commit(
            "mixed",
            {"a.py": "class A:\n    pass\n", "b.go": "type B struct {}\n"},
            date="2024-01-02T00:00:00+00:00",
        )
        report = analyze_component_creation(GitRepository(git_repo.root), framework="go")
        assert [c.component_type for c in report.components] == ["go-struct"]

    def test_spike_month(self, git_repo):
        git_repo.commit("init", {"README.md": "x\n"}, date="2024-01-01T00:00:00+00:00")
        many = "".join(f"class C{i}:\n    pass\n" for i in range(11))
        git_repo.commit("many", {"many.py": many}, date="2024-01-02T00:00:00+00:00")
        report = analyze_component_creation(GitRepository(git_repo.root))
        [spike] = report.spikes
        assert spike.count == 11

    def test_unknown_framework(self, git_repo):
        git_repo.commit("init", {"README.md": "x\n"})
        with pytest.raises(ValueError):
            analyze_component_creation(GitRepository(git_repo.root), framework="cobol")
