"""Tests for directory entropy and project type detection."""

import pytest

from gitallica.metrics.directory_entropy import (
    GENERIC_PROJECT,
    GO_PROJECT,
    NODE_PROJECT,
    PYTHON_PROJECT,
    RUBY_PROJECT,
    analyze_directory_entropy,
    classify_entropy,
    detect_project_type,
    entropy_thresholds,
)
from gitallica.temporal.repository import GitRepository


class TestDetectProjectType:
    @pytest.mark.parametrize(
        "paths,expected",
        [
            (["go.mod", "cmd/main.go"], GO_PROJECT),
            (["package.json", "src/index.js"], NODE_PROJECT),
            (["pyproject.toml", "pkg/a.py"], PYTHON_PROJECT),
            (["Gemfile", "app/models/user.rb"], RUBY_PROJECT),
            (["main.go"], GENERIC_PROJECT),
            ([], GENERIC_PROJECT),
        ],
    )
    def test_markers(self, paths, expected):
        assert detect_project_type(paths) is expected


class TestExpectedDirectories:
    def test_exact_directory_match(self):
        assert PYTHON_PROJECT.is_expected("src", ".py")
        assert not PYTHON_PROJECT.is_expected("src", ".js")
        # nested directories are not covered by their parent's rule
        assert PYTHON_PROJECT.is_expected("src/web", ".js")

    def test_root(self):
        assert PYTHON_PROJECT.is_expected("root", ".cfg")
        assert not PYTHON_PROJECT.is_expected("root", ".go")

    def test_empty_rule_allows_anything(self):
        assert GENERIC_PROJECT.is_expected("src", ".anything")


class TestClassifyEntropy:
    def test_thresholds_have_floors(self):
        assert entropy_thresholds(0.0) == (1.5, 1.0, 0.5)
        assert entropy_thresholds(2.0) == pytest.approx((3.6, 2.8, 1.8))

    @pytest.mark.parametrize(
        "entropy,level", [(0.0, "Low"), (0.5, "Medium"), (1.0, "High"), (1.5, "Critical")]
    )
    def test_directories(self, entropy, level):
        assert classify_entropy(entropy, 0.0, "src")[0] == level

    @pytest.mark.parametrize("entropy,level", [(1.0, "Low"), (1.3, "Medium"), (2.0, "High")])
    def test_root_is_more_lenient(self, entropy, level):
        assert classify_entropy(entropy, 0.0, "root")[0] == level


def test_analyze_directory_entropy(git_repo):
    git_repo.commit(
        "init",
        {
            "setup.py": "x\n",
            "README.md": "x\n",
            "src/a.py": "x\n",
            "src/b.js": "x\n",
            "docs/guide.md": "x\n",
        },
    )
    report = analyze_directory_entropy(GitRepository(git_repo.root))

    assert report.project_type is PYTHON_PROJECT
    assert [d.path for d in report.directories] == ["root", "src", "docs"]
    dirs = {d.path: d for d in report.directories}
    assert dirs["src"].entropy == pytest.approx(1.0)
    assert dirs["src"].unexpected_files == 1
    assert dirs["src"].level == "High"
    assert dirs["root"].level == "Low"
    assert dirs["docs"].file_count == 1
    assert report.average_entropy == pytest.approx(2 / 3)
    assert report.high == [dirs["src"]]
