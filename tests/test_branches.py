"""Tests for long-lived branch detection."""

from datetime import datetime, timezone

import pytest
from conftest import BOB

from gitallica.metrics.branches import (
    BranchReport,
    analyze_branches,
    classify_branch_risk,
    classify_compliance,
)
from gitallica.temporal.repository import GitRepository

NOW = datetime(2024, 1, 6, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "age,risk", [(0.0, "Healthy"), (0.99, "Healthy"), (1.0, "Warning"), (3.0, "Risky"), (7.0, "Critical")]
)
def test_classify_branch_risk(age, risk):
    assert classify_branch_risk(age) == risk


@pytest.mark.parametrize(
    "healthy,total,level",
    [(4, 5, "Excellent"), (3, 5, "Good"), (2, 5, "Moderate"), (1, 5, "Poor"), (0, 5, "Critical"), (0, 0, "Unknown")],
)
def test_classify_compliance(healthy, total, level):
    assert classify_compliance(healthy, total) == level


@pytest.fixture
def branchy_repo(git_repo):
    """feature diverges on Jan 1, fresh on Jan 4, merged-old points at the root commit."""
    git_repo.commit("init", {"a.txt": "a\n"}, date="2024-01-01T00:00:00+00:00")
    git_repo.git("branch", "merged-old")
    git_repo.checkout("feature", create=True)
    git_repo.commit("feature work", {"f.txt": "f\n"}, date="2024-01-02T00:00:00+00:00", author=BOB)
    git_repo.checkout("main")
    git_repo.commit("main work", {"m.txt": "m\n"}, date="2024-01-04T00:00:00+00:00")
    git_repo.checkout("fresh", create=True)
    git_repo.commit("fresh work", {"docs/x.md": "x\n"}, date="2024-01-05T00:00:00+00:00")
    git_repo.checkout("main")
    return GitRepository(git_repo.root)


class TestAnalyzeBranches:
    def test_ages_and_order(self, branchy_repo):
        report = analyze_branches(branchy_repo, now=NOW)

        assert [b.name for b in report.branches] == ["feature", "fresh"]
        feature, fresh = report.branches
        assert feature.age_days == pytest.approx(5.0)
        assert feature.risk == "Risky"
        assert feature.commit_count == 1
        assert feature.last_author == "Bob"
        assert not feature.merged
        assert fresh.age_days == pytest.approx(2.0)
        assert fresh.risk == "Warning"

        assert report.compliance == "Critical"
        assert report.oldest is feature
        assert report.risky == [feature]
        assert report.average_age == pytest.approx(3.5)

    def test_show_merged(self, branchy_repo):
        report = analyze_branches(branchy_repo, show_merged=True, now=NOW)
        merged = {b.name: b for b in report.branches}["merged-old"]
        assert merged.merged
        assert merged.commit_count == 0

    def test_path_filter(self, branchy_repo):
        report = analyze_branches(branchy_repo, paths=["docs"], now=NOW)
        assert [b.name for b in report.branches] == ["fresh"]

    def test_cutoff_on_tip_author_time(self, branchy_repo):
        cutoff = datetime(2024, 1, 3, tzinfo=timezone.utc)
        report = analyze_branches(branchy_repo, cutoff=cutoff, now=NOW)
        assert [b.name for b in report.branches] == ["fresh"]

    def test_custom_thresholds(self, branchy_repo):
        report = analyze_branches(
            branchy_repo, healthy_days=3, warning_days=6, critical_days=10, now=NOW
        )
        assert [b.risk for b in report.branches] == ["Warning", "Healthy"]
        assert report.healthy_days == 3


class TestRecommendations:
    def test_excellent(self):
        assert BranchReport(compliance="Excellent").recommendations() == [
            "Excellent trunk-based development practices! Keep it up."
        ]

    def test_poor_with_risky(self, branchy_repo):
        advice = analyze_branches(branchy_repo, now=NOW).recommendations()
        assert advice[0] == "Consider adopting trunk-based development practices"
        assert "Schedule merging of risky branches to reduce integration risk" in advice
