"""Shared test fixtures for gitallica: scratch git repositories with pinned dates."""

import os
import shutil
import subprocess
from pathlib import Path

import pytest

ALICE = ("Alice", "alice@acme.io")
BOB = ("Bob", "bob@acme.io")
CAROL = ("Carol", "carol@acme.io")


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class GitRepoBuilder:
    """Builds a throwaway repository commit by commit.

    Every commit takes an explicit date so history-dependent tests are
    deterministic; author and committer dates are equal unless
    `committed` is given.
    """

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.env = {
            **os.environ,
            "GIT_CONFIG_NOSYSTEM": "1",
            "GIT_CONFIG_GLOBAL": os.devnull,
            "HOME": str(root),
        }
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "commit.gpgsign", "false")
        self.git("config", "tag.gpgsign", "false")

    def git(self, *args: str, date: str = "", author=ALICE, committed: str = "") -> str:
        env = dict(self.env)
        env.update(
            {
                "GIT_AUTHOR_NAME": author[0],
                "GIT_AUTHOR_EMAIL": author[1],
                "GIT_COMMITTER_NAME": author[0],
                "GIT_COMMITTER_EMAIL": author[1],
            }
        )
        if date:
            env["GIT_AUTHOR_DATE"] = date
            env["GIT_COMMITTER_DATE"] = committed or date
        result = subprocess.run(
            ["git", *args], cwd=self.root, env=env, capture_output=True, text=True, check=True
        )
        return result.stdout.strip()

    def write(self, path: str, content: str) -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    def remove(self, path: str) -> None:
        self.git("rm", "-q", path)

    def commit(
        self,
        message: str,
        files=None,
        date: str = "2024-01-01T12:00:00+00:00",
        author=ALICE,
        committed: str = "",
    ) -> str:
        """Write `files` (path -> content), stage everything and commit; returns the hash."""
        for path, content in (files or {}).items():
            self.write(path, content)
        self.git("add", "-A")
        self.git(
            "commit", "-q", "--allow-empty", "-m", message,
            date=date, author=author, committed=committed,
        )
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD")

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self.git("checkout", "-q", "-b", branch)
        else:
            self.git("checkout", "-q", branch)

    def merge(self, branch: str, message: str, date: str, author=ALICE) -> str:
        self.git("merge", "-q", "--no-ff", "-m", message, branch, date=date, author=author)
        return self.head()

    def tag(self, name: str, date: str, rev: str = "HEAD") -> None:
        self.git("tag", "-a", name, "-m", name, rev, date=date)


def lines(n: int, prefix: str = "line") -> str:
    return "".join(f"{prefix} {i}\n" for i in range(n))


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository builder under tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git not found")
    return GitRepoBuilder(tmp_path / "repo")


@pytest.fixture
def make_repo(tmp_path):
    """Factory for several independent repositories in one test."""
    if shutil.which("git") is None:
        pytest.skip("git not found")
    counter = {"n": 0}

    def factory() -> GitRepoBuilder:
        counter["n"] += 1
        return GitRepoBuilder(tmp_path / f"repo{counter['n']}")

    return factory


@pytest.fixture
def uniform_distribution():
    """Uniform distribution over 4 file types."""
    return {".py": 25, ".md": 25, ".yml": 25, ".sh": 25}


@pytest.fixture
def skewed_distribution():
    """Heavily skewed distribution."""
    return {".py": 97, ".md": 1, ".yml": 1, ".sh": 1}


@pytest.fixture
def empty_distribution():
    """Empty distribution."""
    return {}
