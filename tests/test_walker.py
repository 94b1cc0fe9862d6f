"""Tests for the history walker and merge normalization."""

from datetime import datetime, timezone

import pytest
from conftest import BOB, lines

from gitallica.temporal.repository import GitRepository
from gitallica.temporal.walker import HistoryWalker, MergeStrategy, merge_adjusted


@pytest.mark.parametrize(
    "value,parents,expected",
    [(8, 2, 4), (5, 2, 3), (7, 3, 3), (0, 2, 0), (9, 1, 9), (9, 0, 9)],
)
def test_merge_adjusted(value, parents, expected):
    assert merge_adjusted(value, parents) == expected


@pytest.fixture
def merged_repo(git_repo):
    """init -> feature (+5 in f.txt) and main (+3 in m.txt) -> --no-ff merge."""
    git_repo.commit("init", {"a.txt": lines(10)}, date="2024-01-01T00:00:00+00:00")
    git_repo.checkout("feature", create=True)
    git_repo.commit("feature", {"f.txt": lines(5)}, date="2024-01-02T00:00:00+00:00", author=BOB)
    git_repo.checkout("main")
    git_repo.commit("main", {"m.txt": lines(3)}, date="2024-01-03T00:00:00+00:00")
    git_repo.merge("feature", "merge feature", date="2024-01-04T00:00:00+00:00")
    return GitRepository(git_repo.root)


def _merge_change(walker):
    return next(c for c in walker.changes() if c.commit.is_merge)


class TestMergeStrategies:
    def test_skip_drops_merges(self, merged_repo):
        walker = HistoryWalker(merged_repo, MergeStrategy.SKIP)
        subjects = [c.subject for c in walker.commits()]
        assert subjects == ["main", "feature", "init"]

    def test_first_parent_diffs_against_mainline(self, merged_repo):
        change = _merge_change(HistoryWalker(merged_repo, MergeStrategy.FIRST_PARENT))
        assert change.additions == 5
        assert change.file_count == 1
        assert [f.path for f in change.files] == ["f.txt"]

    def test_all_parents_ceiling_divides(self, merged_repo):
        change = _merge_change(HistoryWalker(merged_repo, MergeStrategy.ALL_PARENTS))
        # (5 + 3) / 2 lines, (1 + 1) / 2 files
        assert change.additions == 4
        assert change.file_count == 1
        per_file = {f.path: f.added for f in change.files}
        assert per_file == {"f.txt": 3, "m.txt": 2}

    def test_all_parents_total_over_history(self, merged_repo):
        walker = HistoryWalker(merged_repo, MergeStrategy.ALL_PARENTS)
        assert sum(c.additions for c in walker.changes()) == 10 + 5 + 3 + 4


class TestFilters:
    def test_cutoff_stops_walk(self, merged_repo):
        cutoff = datetime(2024, 1, 2, 12, tzinfo=timezone.utc)
        walker = HistoryWalker(merged_repo, MergeStrategy.SKIP, cutoff=cutoff)
        assert [c.subject for c in walker.commits()] == ["main"]

    def test_cutoff_as_filter(self, git_repo):
        git_repo.commit("old", {"a.txt": "a\n"}, date="2023-01-01T00:00:00+00:00")
        # authored long ago, committed recently (e.g. a rebase)
        git_repo.commit(
            "rebased", {"b.txt": "b\n"},
            date="2022-06-01T00:00:00+00:00", committed="2024-01-01T00:00:00+00:00",
        )
        repo = GitRepository(git_repo.root)
        cutoff = datetime(2023, 6, 1, tzinfo=timezone.utc)

        by_author = HistoryWalker(repo, cutoff=cutoff, use_author_time=True, stop_at_cutoff=False)
        assert list(by_author.commits()) == []
        by_committer = HistoryWalker(repo, cutoff=cutoff)
        assert [c.subject for c in by_committer.commits()] == ["rebased"]

    def test_path_filter(self, merged_repo):
        walker = HistoryWalker(merged_repo, MergeStrategy.SKIP, paths=["f.txt"])
        touched = {c.commit.subject: c.file_count for c in walker.changes()}
        assert touched == {"main": 0, "feature": 1, "init": 0}

    def test_skip_root(self, merged_repo):
        walker = HistoryWalker(merged_repo, MergeStrategy.SKIP, skip_root=True)
        assert "init" not in [c.subject for c in walker.commits()]

