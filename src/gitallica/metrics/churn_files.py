"""Per-file and per-directory churn."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..temporal.paths import directory_of
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import INF, Band, classify, head_line_counts, percent

CHURN_FILES_CONTEXT = (
    "Files with >20% churn often indicate architectural instability or frequent refactoring needs."
)

FILE_CHURN_BANDS = (
    Band(5.0, "Healthy"),
    Band(20.0, "Caution"),
    Band(INF, "Warning"),
)


@dataclass
class FileChurn:
    path: str
    additions: int = 0
    deletions: int = 0
    total_loc: int = 0
    churn_percent: float = 0.0
    status: str = "Healthy"
    file_count: int = 1


def calculate_file_churn(additions: int, deletions: int, total_loc: int) -> tuple[float, str]:
    """Churn for one file or directory. A file with no current lines is Healthy at 0%."""
    if total_loc <= 0:
        return 0.0, "Healthy"
    churn = percent(additions + deletions, total_loc)
    return churn, classify(churn, FILE_CHURN_BANDS).label


def sort_by_churn(items: list[FileChurn]) -> list[FileChurn]:
    return sorted(items, key=lambda f: (-f.churn_percent, f.path))


def aggregate_directories(files: Iterable[FileChurn]) -> list[FileChurn]:
    """Roll file stats up to their parent directory ("dir/", "root/" for top level)."""
    dirs: dict[str, FileChurn] = {}
    for f in files:
        parent = directory_of(f.path)
        key = "root/" if parent == "root" else parent + "/"
        d = dirs.setdefault(key, FileChurn(path=key, file_count=0))
        d.additions += f.additions
        d.deletions += f.deletions
        d.total_loc += f.total_loc
        d.file_count += 1

    for d in dirs.values():
        d.churn_percent, d.status = calculate_file_churn(d.additions, d.deletions, d.total_loc)
    return sort_by_churn(list(dirs.values()))


def analyze_file_churn(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
) -> list[FileChurn]:
    """Churn for every file changed inside the window, sorted by churn desc."""
    paths = list(paths)
    sizes = head_line_counts(repo, paths)
    walker = HistoryWalker(repo, MergeStrategy.ALL_PARENTS, cutoff=cutoff, paths=paths)

    stats: dict[str, FileChurn] = {}
    for change in walker.changes():
        for f in change.files:
            entry = stats.setdefault(f.path, FileChurn(path=f.path))
            entry.additions += f.added
            entry.deletions += f.deleted

    for entry in stats.values():
        entry.total_loc = sizes.get(entry.path, 0)
        entry.churn_percent, entry.status = calculate_file_churn(
            entry.additions, entry.deletions, entry.total_loc
        )
    return sort_by_churn(list(stats.values()))
