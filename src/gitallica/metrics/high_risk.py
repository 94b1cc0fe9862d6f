"""Monster commits: commits that touch too many lines or files."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import percent

HIGH_RISK_CONTEXT = (
    "Large commits reduce review effectiveness and rollback safety (Kent Beck, Martin Fowler)."
)

# (lines, files) thresholds; either one reaching the bar is enough.
CRITICAL_THRESHOLDS = (1000, 20)
HIGH_THRESHOLDS = (500, 10)
MODERATE_THRESHOLDS = (200, 5)

RISKY_LEVELS = ("Moderate", "High", "Critical")


@dataclass
class RiskyCommit:
    hash: str
    author: str
    date: datetime
    message: str
    lines_changed: int
    files_changed: int
    risk: str
    reason: str

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass
class HighRiskReport:
    commits: list[RiskyCommit] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.commits)

    def count(self, risk: str) -> int:
        return sum(1 for c in self.commits if c.risk == risk)

    @property
    def average_lines(self) -> float:
        return sum(c.lines_changed for c in self.commits) / self.total if self.commits else 0.0

    @property
    def average_files(self) -> float:
        return sum(c.files_changed for c in self.commits) / self.total if self.commits else 0.0

    @property
    def largest(self) -> Optional[RiskyCommit]:
        if not self.commits:
            return None
        return max(self.commits, key=lambda c: c.lines_changed)

    @property
    def risky(self) -> list[RiskyCommit]:
        """Moderate and worse, most lines first."""
        return sorted(
            (c for c in self.commits if c.risk in RISKY_LEVELS),
            key=lambda c: (-c.lines_changed, c.hash),
        )

    @property
    def risky_percent(self) -> float:
        return percent(len(self.risky), self.total)

    def advice(self) -> str:
        share = self.risky_percent
        if share > 30:
            return f"{share:.1f}% of commits are risky - consider implementing commit size guidelines"
        if share > 15:
            return f"{share:.1f}% of commits are risky - monitor commit patterns"
        return f"{share:.1f}% risky commits - good commit hygiene!"


def classify_commit_risk(lines_changed: int, files_changed: int) -> tuple[str, str]:
    if lines_changed >= CRITICAL_THRESHOLDS[0] or files_changed >= CRITICAL_THRESHOLDS[1]:
        return "Critical", "Very large changes increase integration risk"
    if lines_changed >= HIGH_THRESHOLDS[0] or files_changed >= HIGH_THRESHOLDS[1]:
        return "High", "Large changes increase review complexity"
    if lines_changed >= MODERATE_THRESHOLDS[0] or files_changed >= MODERATE_THRESHOLDS[1]:
        return "Moderate", "Moderate complexity requires careful review"
    return "Low", "Small changes are easier to review and debug"


def analyze_high_risk_commits(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
) -> HighRiskReport:
    walker = HistoryWalker(
        repo, MergeStrategy.SKIP, cutoff=cutoff, paths=paths, skip_empty_email=True
    )

    report = HighRiskReport()
    for change in walker.changes():
        if change.file_count == 0:
            continue
        risk, reason = classify_commit_risk(change.lines_changed, change.file_count)
        report.commits.append(
            RiskyCommit(
                hash=change.commit.hash,
                author=change.commit.author_email,
                date=change.commit.authored_at,
                message=change.commit.subject,
                lines_changed=change.lines_changed,
                files_changed=change.file_count,
                risk=risk,
                reason=reason,
            )
        )
    return report
