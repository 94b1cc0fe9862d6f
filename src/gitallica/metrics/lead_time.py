"""DORA change lead time: from authoring a commit to its integration.

Two ways to decide when a commit was integrated:

- merge: author time of the first-parent mainline merge that brought the
  commit in. Commits made directly on the mainline count as integrated
  immediately.
- tag: creation time of the earliest tag whose history contains the commit.
  Commits that no tag contains yet are left out.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from ..math import Statistics
from ..temporal.models import CommitRecord
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import UNKNOWN, percent

logger = get_logger(__name__)

LEAD_TIME_CONTEXT = (
    "DORA research shows lead time is a key predictor of software delivery performance."
)

ELITE_HOURS = 24.0
HIGH_HOURS = 168.0
MEDIUM_HOURS = 720.0

ELITE_SHARE = 0.7
HIGH_SHARE = 0.6
MEDIUM_SHARE = 0.5

METHODS = ("merge", "tag")
LEVELS = ("Elite", "High", "Medium", "Low")


@dataclass
class CommitLeadTime:
    hash: str
    author: str
    authored_at: datetime
    integrated_at: datetime
    hours: float
    classification: str

    @property
    def short_hash(self) -> str:
        return self.hash[:8]


@dataclass
class LeadTimeReport:
    method: str
    commits: list[CommitLeadTime] = field(default_factory=list)
    average_hours: float = 0.0
    median_hours: float = 0.0
    p95_hours: float = 0.0
    distribution: dict[str, int] = field(default_factory=dict)
    level: str = UNKNOWN

    @property
    def total(self) -> int:
        return len(self.commits)

    @property
    def elite_percent(self) -> float:
        return percent(self.distribution.get("Elite", 0), self.total)

    def fastest(self, limit: int) -> list[CommitLeadTime]:
        return sorted(self.commits, key=lambda c: (c.hours, c.hash))[:limit]

    def slowest(self, limit: int) -> list[CommitLeadTime]:
        return sorted(self.commits, key=lambda c: (-c.hours, c.hash))[:limit]

    def recommendations(self) -> list[str]:
        if self.level == "Elite":
            advice = [
                "Excellent delivery performance! Maintain current practices",
                "Share learnings with other teams to scale elite practices",
            ]
        elif self.level == "High":
            advice = [
                "Good delivery performance with room for optimization",
                f"Focus on moving more commits to elite level (currently {self.elite_percent:.1f}%)",
            ]
        elif self.level == "Medium":
            advice = [
                "Moderate delivery performance - significant improvement opportunity",
                "Review deployment pipeline for bottlenecks and automation gaps",
                "Consider trunk-based development and feature flags",
            ]
        elif self.level == "Low":
            advice = [
                "Low delivery performance - critical improvement needed",
                "Implement continuous integration and deployment practices",
                "Reduce batch sizes and increase deployment frequency",
                "Focus on automation and reducing manual processes",
            ]
        else:
            advice = ["Insufficient data for performance assessment"]

        if self.p95_hours > MEDIUM_HOURS:
            advice.append("95th percentile lead time is very high - investigate outliers")
        return advice


def lead_time_hours(authored_at: datetime, integrated_at: datetime) -> float:
    return max(0.0, (integrated_at - authored_at).total_seconds() / 3600)


def classify_lead_time(hours: float) -> str:
    if hours < ELITE_HOURS:
        return "Elite"
    if hours < HIGH_HOURS:
        return "High"
    if hours < MEDIUM_HOURS:
        return "Medium"
    return "Low"


def classify_performance_level(distribution: dict[str, int]) -> str:
    total = sum(distribution.values())
    if total == 0:
        return UNKNOWN
    elite = distribution.get("Elite", 0)
    high = distribution.get("High", 0)
    medium = distribution.get("Medium", 0)

    if elite / total >= ELITE_SHARE:
        return "Elite"
    if (elite + high) / total >= HIGH_SHARE:
        return "High"
    if (elite + high + medium) / total >= MEDIUM_SHARE:
        return "Medium"
    return "Low"


def lead_time_stats(commits: list[CommitLeadTime], method: str) -> LeadTimeReport:
    hours = [c.hours for c in commits]
    counts = Counter(c.classification for c in commits)
    distribution = {level: counts.get(level, 0) for level in LEVELS}
    return LeadTimeReport(
        method=method,
        commits=commits,
        average_hours=Statistics.mean(hours),
        median_hours=Statistics.median(hours),
        p95_hours=Statistics.percentile(hours, 95),
        distribution=distribution,
        level=classify_performance_level(distribution),
    )


def merge_integration_times(repo: GitRepository) -> dict[str, datetime]:
    """Commit id -> integration time for the merge method.

    Mainline commits map to their own author time; commits brought in by a
    mainline merge map to that merge's author time.
    """
    integrated: dict[str, datetime] = {}
    for merge in repo.iter_commits(first_parent=True):
        integrated[merge.hash] = merge.authored_at
        if not merge.is_merge:
            continue
        try:
            introduced = repo.rev_list(merge.hash, "--not", merge.parents[0])
        except GitCommandError as e:
            logger.warning("Skipping merge %s: %s", merge.short_hash, e)
            continue
        for sha in introduced:
            if sha != merge.hash:
                integrated[sha] = merge.authored_at
    return integrated


def tag_integration_times(repo: GitRepository) -> dict[str, datetime]:
    """Commit id -> creation time of the earliest tag containing it."""
    tags = sorted(
        (t for t in repo.tags() if t.created_at is not None),
        key=lambda t: (t.created_at, t.name),
    )
    integrated: dict[str, datetime] = {}
    previous: Optional[str] = None
    for tag in tags:
        args = [tag.target] + (["--not", previous] if previous else [])
        try:
            reachable = repo.rev_list(*args)
        except GitCommandError as e:
            logger.warning("Skipping tag %s: %s", tag.short_name, e)
            continue
        for sha in reachable:
            integrated.setdefault(sha, tag.created_at)
        previous = tag.target
    return integrated


def _candidate_commits(
    repo: GitRepository, cutoff: Optional[datetime], paths: list[str]
) -> Iterable[CommitRecord]:
    walker = HistoryWalker(
        repo,
        MergeStrategy.SKIP,
        cutoff=cutoff,
        paths=paths,
        use_author_time=True,
        stop_at_cutoff=False,
    )
    if paths:
        return [c.commit for c in walker.changes() if c.file_count > 0]
    return walker.commits()


def analyze_lead_time(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    method: str = "merge",
) -> LeadTimeReport:
    if method not in METHODS:
        raise ValueError(f"unknown lead time method: {method}")

    integrated = merge_integration_times(repo) if method == "merge" else tag_integration_times(repo)

    commits = []
    for commit in _candidate_commits(repo, cutoff, list(paths)):
        integrated_at = integrated.get(commit.hash)
        if integrated_at is None:
            continue
        hours = lead_time_hours(commit.authored_at, integrated_at)
        commits.append(
            CommitLeadTime(
                hash=commit.hash,
                author=commit.author,
                authored_at=commit.authored_at,
                integrated_at=integrated_at,
                hours=hours,
                classification=classify_lead_time(hours),
            )
        )
    return lead_time_stats(commits, method)
