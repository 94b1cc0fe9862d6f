"""Tests for DORA change lead time."""

import pytest
from conftest import BOB, lines

from gitallica.metrics.lead_time import (
    analyze_lead_time,
    classify_lead_time,
    classify_performance_level,
    merge_integration_times,
)
from gitallica.temporal.repository import GitRepository


class TestClassification:
    @pytest.mark.parametrize(
        "hours,level",
        [(0, "Elite"), (23.9, "Elite"), (24, "High"), (167.9, "High"), (168, "Medium"), (719, "Medium"), (720, "Low")],
    )
    def test_commit_level(self, hours, level):
        assert classify_lead_time(hours) == level

    @pytest.mark.parametrize(
        "distribution,level",
        [
            ({"Elite": 7, "High": 3}, "Elite"),
            ({"Elite": 5, "High": 1, "Medium": 4}, "High"),
            ({"Elite": 2, "Medium": 3, "Low": 5}, "Medium"),
            ({"Low": 1}, "Low"),
            ({}, "Unknown"),
        ],
    )
    def test_performance_level(self, distribution, level):
        assert classify_performance_level(distribution) == level


@pytest.fixture
def feature_repo(git_repo):
    git_repo.commit("init", {"a.txt": lines(3)}, date="2024-01-01T00:00:00+00:00")
    git_repo.checkout("feature", create=True)
    git_repo.commit("feature", {"f.txt": lines(3)}, date="2024-01-02T00:00:00+00:00", author=BOB)
    git_repo.checkout("main")
    git_repo.commit("main", {"m.txt": lines(3)}, date="2024-01-03T00:00:00+00:00")
    git_repo.merge("feature", "merge feature", date="2024-01-04T00:00:00+00:00")
    return git_repo


class TestMergeMethod:
    def test_integration_times(self, feature_repo):
        repo = GitRepository(feature_repo.root)
        integrated = merge_integration_times(repo)
        merge = repo.commit("HEAD")
        feature = repo.commit("feature")
        assert integrated[feature.hash] == merge.authored_at

    def test_report(self, feature_repo):
        report = analyze_lead_time(GitRepository(feature_repo.root), method="merge")

        assert report.total == 3
        hours = sorted(c.hours for c in report.commits)
        assert hours == [0.0, 0.0, 48.0]
        assert report.distribution == {"Elite": 2, "High": 1, "Medium": 0, "Low": 0}
        assert report.level == "High"
        assert report.slowest(1)[0].author == "bob@acme.io"
        assert report.median_hours == 0.0

    def test_unknown_method(self, feature_repo):
        with pytest.raises(ValueError):
            analyze_lead_time(GitRepository(feature_repo.root), method="deploy")


class TestTagMethod:
    def test_earliest_containing_tag(self, git_repo):
        git_repo.commit("one", {"a.txt": "1\n"}, date="2024-01-01T00:00:00+00:00")
        git_repo.tag("v1", date="2024-01-03T00:00:00+00:00")
        git_repo.commit("two", {"a.txt": "2\n"}, date="2024-01-05T00:00:00+00:00")
        git_repo.tag("v2", date="2024-01-10T00:00:00+00:00")
        git_repo.commit("untagged", {"a.txt": "3\n"}, date="2024-01-11T00:00:00+00:00")

        report = analyze_lead_time(GitRepository(git_repo.root), method="tag")
        by_hours = sorted(c.hours for c in report.commits)
        assert by_hours == [48.0, 120.0]
        assert report.level == "High"

    def test_no_tags(self, git_repo):
        git_repo.commit("one", {"a.txt": "1\n"})
        report = analyze_lead_time(GitRepository(git_repo.root), method="tag")
        assert report.total == 0
        assert report.level == "Unknown"
        assert report.recommendations() == ["Insufficient data for performance assessment"]
