"""Tests for the onboarding footprint of new contributors."""

from datetime import datetime, timezone

import pytest
from conftest import ALICE, BOB, CAROL

from gitallica.metrics.onboarding import analyze_onboarding, classify_onboarding
from gitallica.temporal.repository import GitRepository


@pytest.mark.parametrize(
    "files,status",
    [(0, "Simple"), (5, "Simple"), (6, "Moderate"), (10, "Moderate"), (11, "Complex"), (20, "Complex"), (21, "Overwhelming")],
)
def test_classify_onboarding(files, status):
    assert classify_onboarding(files)[0] == status


@pytest.fixture
def team_repo(git_repo):
    git_repo.commit("setup", {"a.txt": "a\n", "b.txt": "b\n"}, date="2024-01-01T00:00:00+00:00", author=ALICE)
    git_repo.commit("more", {"c.txt": "c\n"}, date="2024-01-02T00:00:00+00:00", author=ALICE)
    git_repo.commit("first fix", {"a.txt": "a2\n"}, date="2024-01-10T00:00:00+00:00", author=BOB)
    git_repo.commit(
        "first feature", {"a.txt": "a3\n", "d.txt": "d\n"}, date="2024-01-12T00:00:00+00:00", author=CAROL
    )
    return GitRepository(git_repo.root)


class TestAnalyzeOnboarding:
    def test_everyone_newest_first(self, team_repo):
        report = analyze_onboarding(team_repo)

        assert [c.author for c in report.contributors] == ["carol@acme.io", "bob@acme.io", "alice@acme.io"]
        alice = report.contributors[-1]
        assert alice.files == ["a.txt", "b.txt", "c.txt"]
        assert alice.commits_analyzed == 2
        assert alice.status == "Simple"
        assert report.average_files == pytest.approx((2 + 1 + 3) / 3)
        assert report.distribution()["Simple"] == 3

    def test_common_files(self, team_repo):
        report = analyze_onboarding(team_repo)
        top = report.common_files[0]
        assert (top.path, top.contributors, top.percentage) == ("a.txt", 3, 100.0)
        assert [f.path for f in report.common_files[1:]] == ["b.txt", "c.txt", "d.txt"]

    def test_since_uses_first_commit(self, team_repo):
        since = datetime(2024, 1, 5, tzinfo=timezone.utc)
        report = analyze_onboarding(team_repo, since=since)
        assert [c.author for c in report.contributors] == ["carol@acme.io", "bob@acme.io"]

    def test_commit_limit(self, team_repo):
        report = analyze_onboarding(team_repo, commit_limit=1)
        alice = {c.author: c for c in report.contributors}["alice@acme.io"]
        assert alice.files_touched == 2
        assert alice.commits_analyzed == 1
        assert report.commit_limit == 1
