"""Repository-wide churn: (additions + deletions) relative to current size."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import INF, UNKNOWN, Band, classify, head_line_counts, percent

CHURN_CONTEXT = "Healthy codebases typically maintain churn below ~15% (KPI Depot; Opsera benchmarks)."

CHURN_BANDS = (
    Band(5.0, "Healthy"),
    Band(15.0, "Caution"),
    Band(INF, "Warning"),
)

STATUS_HINTS = {
    "Healthy": "<5%",
    "Caution": "5-15%",
    "Warning": ">=15%",
    UNKNOWN: "no lines of code",
}


@dataclass
class ChurnReport:
    additions: int
    deletions: int
    total_loc: int
    churn_percent: float
    status: str


def calculate_churn(additions: int, deletions: int, total_loc: int) -> tuple[float, str]:
    """Churn percentage and status; an empty codebase is (0.0, "Unknown")."""
    if total_loc <= 0:
        return 0.0, UNKNOWN
    churn = percent(additions + deletions, total_loc)
    return churn, classify(churn, CHURN_BANDS).label


def analyze_churn(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
) -> ChurnReport:
    paths = list(paths)
    walker = HistoryWalker(repo, MergeStrategy.ALL_PARENTS, cutoff=cutoff, paths=paths)

    additions = deletions = 0
    for change in walker.changes():
        additions += change.additions
        deletions += change.deletions

    total_loc = sum(head_line_counts(repo, paths).values())
    churn, status = calculate_churn(additions, deletions, total_loc)
    return ChurnReport(additions, deletions, total_loc, churn, status)
