"""Long-lived branches and trunk-based development compliance."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from ..temporal.models import RefInfo
from ..temporal.paths import matches_path_filter
from ..temporal.repository import GitRepository
from ..temporal.windows import utcnow
from ._common import INF, UNKNOWN, Band, classify, percent

logger = get_logger(__name__)

BRANCHES_CONTEXT = (
    "DORA research shows elite teams merge frequently and keep branches short-lived."
)

MAX_COMMIT_COUNT = 1000

COMPLIANCE_BANDS = (
    (0.8, "Excellent"),
    (0.6, "Good"),
    (0.4, "Moderate"),
    (0.2, "Poor"),
)


@dataclass
class BranchInfo:
    name: str
    age_days: float
    risk: str
    last_author: str
    last_commit_at: datetime
    commit_count: int
    tip: str
    merged: bool = False


@dataclass
class BranchReport:
    branches: list[BranchInfo] = field(default_factory=list)
    compliance: str = UNKNOWN
    healthy_days: float = 1.0

    @property
    def total(self) -> int:
        return len(self.branches)

    def count(self, risk: str) -> int:
        return sum(1 for b in self.branches if b.risk == risk)

    @property
    def average_age(self) -> float:
        if not self.branches:
            return 0.0
        return sum(b.age_days for b in self.branches) / len(self.branches)

    @property
    def healthy_percent(self) -> float:
        return percent(self.count("Healthy"), self.total)

    @property
    def oldest(self) -> Optional[BranchInfo]:
        return self.branches[0] if self.branches else None

    @property
    def risky(self) -> list[BranchInfo]:
        return [b for b in self.branches if b.risk in ("Risky", "Critical")]

    def recommendations(self) -> list[str]:
        advice = []
        if self.compliance in ("Critical", "Poor"):
            advice += [
                "Consider adopting trunk-based development practices",
                "Merge feature branches daily or every few days",
                "Break large features into smaller, incremental changes",
            ]
        if self.count("Critical"):
            advice += [
                "Review and merge critical long-lived branches immediately",
                "Consider breaking large changes into smaller pull requests",
            ]
        if self.count("Risky"):
            advice.append("Schedule merging of risky branches to reduce integration risk")
        if self.compliance == "Excellent":
            advice.append("Excellent trunk-based development practices! Keep it up.")
        return advice


def branch_risk_bands(healthy: float = 1.0, warning: float = 3.0, critical: float = 7.0) -> tuple[Band, ...]:
    return (
        Band(healthy, "Healthy"),
        Band(warning, "Warning"),
        Band(critical, "Risky"),
        Band(INF, "Critical"),
    )


def classify_branch_risk(age_days: float, bands: tuple[Band, ...] = branch_risk_bands()) -> str:
    return classify(age_days, bands).label


def classify_compliance(healthy: int, total: int) -> str:
    if total == 0:
        return UNKNOWN
    ratio = healthy / total
    for threshold, label in COMPLIANCE_BANDS:
        if ratio >= threshold:
            return label
    return "Critical"


def age_in_days(since: datetime, now: datetime) -> float:
    return (now - since).total_seconds() / 86400


def inspect_branch(
    repo: GitRepository,
    ref: RefInfo,
    head: str,
    now: datetime,
    cutoff: Optional[datetime],
    paths: list[str],
    show_merged: bool,
    bands: tuple[Band, ...],
) -> Optional[BranchInfo]:
    """BranchInfo for `ref`, or None when a filter excludes it."""
    tip = repo.commit(ref.target)
    if cutoff is not None and tip.authored_at < cutoff:
        return None

    merged = repo.is_ancestor(tip.hash, head)
    if merged and not show_merged:
        return None

    base = repo.merge_base(tip.hash, head)
    if paths:
        changed = repo.changed_paths(base, tip.hash) if base else [e.path for e in repo.tree(tip.hash)]
        if not any(matches_path_filter(p, paths) for p in changed):
            return None

    diverged_at = repo.commit(base).authored_at if base else tip.authored_at
    commits = repo.count_commits(base, tip.hash, MAX_COMMIT_COUNT) if base else 0
    age = age_in_days(diverged_at, now)
    return BranchInfo(
        name=ref.short_name,
        age_days=age,
        risk=classify_branch_risk(age, bands),
        last_author=tip.author_name,
        last_commit_at=tip.authored_at,
        commit_count=min(commits, MAX_COMMIT_COUNT),
        tip=tip.hash,
        merged=merged,
    )


def analyze_branches(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    show_merged: bool = False,
    healthy_days: float = 1.0,
    warning_days: float = 3.0,
    critical_days: float = 7.0,
    now: Optional[datetime] = None,
) -> BranchReport:
    now = now or utcnow()
    paths = [p for p in paths if p]
    bands = branch_risk_bands(healthy_days, warning_days, critical_days)
    head = repo.head()
    head_ref = repo.head_ref()

    branches = []
    for ref in repo.branches():
        if ref.name == head_ref:
            continue
        try:
            info = inspect_branch(repo, ref, head, now, cutoff, paths, show_merged, bands)
        except GitCommandError as e:
            logger.warning("Skipping branch %s: %s", ref.short_name, e)
            continue
        if info is not None:
            branches.append(info)

    branches.sort(key=lambda b: (-b.age_days, b.name))
    healthy = sum(1 for b in branches if b.risk == "Healthy")
    return BranchReport(
        branches=branches,
        compliance=classify_compliance(healthy, len(branches)),
        healthy_days=healthy_days,
    )
