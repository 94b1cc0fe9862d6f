"""Commit size risk: lines and files changed per commit."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..temporal.models import CommitChanges
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import ranked

COMMIT_SIZE_CONTEXT = (
    "Large commits reduce review effectiveness and rollback safety. "
    "Studies show reviews are most effective under 400 lines."
)

LOW_SCORE = 100
MEDIUM_SCORE = 400
HIGH_SCORE = 800
FILES_LOW = 5
FILES_HIGH = 15
FILE_WEIGHT = 10

RISK_LEVELS = ("Low", "Medium", "High", "Critical")
RISK_RANK = ranked(RISK_LEVELS)


@dataclass
class CommitSize:
    hash: str
    message: str
    author: str
    date: datetime
    additions: int
    deletions: int
    files_changed: int
    score: int
    risk: str

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions


def calculate_commit_risk(additions: int, deletions: int, files_changed: int) -> tuple[str, int]:
    """Risk level and score, where score = lines changed + 10 per file."""
    score = additions + deletions + files_changed * FILE_WEIGHT

    if score >= HIGH_SCORE:
        risk = "Critical" if files_changed >= FILES_HIGH else "High"
    elif score >= MEDIUM_SCORE:
        risk = "High" if files_changed >= FILES_LOW else "Medium"
    elif score >= LOW_SCORE:
        risk = "Medium" if files_changed >= FILES_LOW else "Low"
    else:
        risk = "Low"
    return risk, score


def filter_by_min_risk(commits: Iterable[CommitSize], min_risk: str) -> list[CommitSize]:
    """Keep commits at or above `min_risk`; an unknown level keeps everything."""
    floor = RISK_RANK.get(min_risk.capitalize(), 0) if min_risk else 0
    return [c for c in commits if RISK_RANK[c.risk] >= floor]


def risk_distribution(commits: Iterable[CommitSize]) -> dict[str, int]:
    counts = Counter(c.risk for c in commits)
    return {level: counts.get(level, 0) for level in RISK_LEVELS}


def commit_size(change: CommitChanges) -> CommitSize:
    risk, score = calculate_commit_risk(change.additions, change.deletions, change.file_count)
    return CommitSize(
        hash=change.commit.hash,
        message=change.commit.subject,
        author=change.commit.author_name or change.commit.author,
        date=change.commit.committed_at,
        additions=change.additions,
        deletions=change.deletions,
        files_changed=change.file_count,
        score=score,
        risk=risk,
    )


def analyze_commit_sizes(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
) -> list[CommitSize]:
    """Every commit touching an in-scope file, largest score first."""
    walker = HistoryWalker(repo, MergeStrategy.ALL_PARENTS, cutoff=cutoff, paths=paths)
    commits = [commit_size(change) for change in walker.changes() if change.file_count > 0]
    return sorted(commits, key=lambda c: (-c.score, c.hash))
