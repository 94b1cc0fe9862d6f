"""Tests for repository-wide and per-file churn."""

import pytest
from conftest import lines

from gitallica.metrics.churn import analyze_churn, calculate_churn
from gitallica.metrics.churn_files import (
    FileChurn,
    aggregate_directories,
    analyze_file_churn,
    calculate_file_churn,
)
from gitallica.temporal.repository import GitRepository


class TestCalculateChurn:
    def test_no_code_is_unknown(self):
        assert calculate_churn(10, 5, 0) == (0.0, "Unknown")

    @pytest.mark.parametrize(
        "changed,status",
        [(0, "Healthy"), (4, "Healthy"), (5, "Caution"), (14, "Caution"), (15, "Warning"), (300, "Warning")],
    )
    def test_bands_are_lower_inclusive(self, changed, status):
        churn, label = calculate_churn(changed, 0, 100)
        assert churn == pytest.approx(changed)
        assert label == status


class TestCalculateFileChurn:
    def test_zero_loc_is_healthy(self):
        assert calculate_file_churn(40, 12, 0) == (0.0, "Healthy")

    @pytest.mark.parametrize(
        "changed,status",
        [(4, "Healthy"), (5, "Caution"), (19, "Caution"), (20, "Warning")],
    )
    def test_bands(self, changed, status):
        assert calculate_file_churn(changed, 0, 100)[1] == status


class TestAggregateDirectories:
    def test_rolls_up_by_parent(self):
        files = [
            FileChurn("src/a.go", additions=10, total_loc=100),
            FileChurn("src/b.go", additions=30, deletions=10, total_loc=100),
            FileChurn("README.md", additions=1, total_loc=50),
        ]
        dirs = {d.path: d for d in aggregate_directories(files)}

        assert set(dirs) == {"src/", "root/"}
        assert dirs["src/"].file_count == 2
        assert dirs["src/"].total_loc == 200
        assert dirs["src/"].churn_percent == pytest.approx(25.0)
        assert dirs["src/"].status == "Warning"
        assert dirs["root/"].churn_percent == pytest.approx(2.0)

    def test_sorted_by_churn(self):
        files = [FileChurn("low/a", additions=1, total_loc=100), FileChurn("high/a", additions=50, total_loc=100)]
        assert [d.path for d in aggregate_directories(files)] == ["high/", "low/"]


class TestAnalyzeChurn:
    def test_scenario_deleting_after_root_commit(self, git_repo):
        """100 lines added, 20 deleted, 80 remain: 120 / 80 = 150%."""
        git_repo.commit("init", {"a.txt": lines(60), "b.txt": lines(40)}, date="2024-01-01T00:00:00+00:00")
        git_repo.commit("trim", {"a.txt": lines(40)}, date="2024-01-02T00:00:00+00:00")

        report = analyze_churn(GitRepository(git_repo.root))
        assert report.additions == 100
        assert report.deletions == 20
        assert report.total_loc == 80
        assert report.churn_percent == pytest.approx(150.0)
        assert report.status == "Warning"

    def test_path_filter(self, git_repo):
        git_repo.commit("init", {"src/a.txt": lines(10), "docs/b.txt": lines(90)})
        report = analyze_churn(GitRepository(git_repo.root), paths=["src"])
        assert (report.additions, report.total_loc) == (10, 10)

    def test_binary_files_do_not_count_as_loc(self, git_repo):
        git_repo.write("img.bin", "")
        (git_repo.root / "img.bin").write_bytes(b"\x00" * 64)
        git_repo.commit("binary only")
        report = analyze_churn(GitRepository(git_repo.root))
        assert report.total_loc == 0
        assert report.status == "Unknown"


class TestAnalyzeFileChurn:
    def test_per_file_stats(self, git_repo):
        git_repo.commit("init", {"hot.txt": lines(10), "cold.txt": lines(100)}, date="2024-01-01T00:00:00+00:00")
        git_repo.commit("edit", {"hot.txt": lines(10, "changed")}, date="2024-01-02T00:00:00+00:00")

        files = analyze_file_churn(GitRepository(git_repo.root))
        assert [f.path for f in files] == ["hot.txt", "cold.txt"]
        hot = files[0]
        assert (hot.additions, hot.deletions, hot.total_loc) == (20, 10, 10)
        assert hot.churn_percent == pytest.approx(300.0)
        assert hot.status == "Warning"

    def test_deleted_file_has_zero_loc(self, git_repo):
        git_repo.commit("init", {"gone.txt": lines(5), "kept.txt": lines(5)})
        git_repo.remove("gone.txt")
        git_repo.commit("remove", date="2024-01-02T00:00:00+00:00")

        files = {f.path: f for f in analyze_file_churn(GitRepository(git_repo.root))}
        assert files["gone.txt"].total_loc == 0
        assert files["gone.txt"].status == "Healthy"
