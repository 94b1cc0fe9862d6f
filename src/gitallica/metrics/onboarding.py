"""Onboarding footprint: how many files new contributors touch in their first commits."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from ..temporal.models import CommitRecord
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import percent

logger = get_logger(__name__)

ONBOARDING_CONTEXT = (
    "Scoped, small first tasks help new developers succeed (Clean Code - Robert C. Martin)."
)

DEFAULT_COMMIT_LIMIT = 5
SIMPLE_FILES = 5
MODERATE_FILES = 10
COMPLEX_FILES = 20

CLASSES = ("Simple", "Moderate", "Complex", "Overwhelming")


@dataclass
class NewContributor:
    author: str
    first_commit_at: datetime
    files_touched: int
    commits_analyzed: int
    status: str
    recommendation: str
    files: list[str] = field(default_factory=list)


@dataclass
class FilePopularity:
    path: str
    contributors: int
    percentage: float


@dataclass
class OnboardingReport:
    commit_limit: int
    contributors: list[NewContributor] = field(default_factory=list)
    common_files: list[FilePopularity] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.contributors)

    @property
    def average_files(self) -> float:
        if not self.contributors:
            return 0.0
        return sum(c.files_touched for c in self.contributors) / len(self.contributors)

    def distribution(self) -> dict[str, int]:
        counts = Counter(c.status for c in self.contributors)
        return {label: counts.get(label, 0) for label in CLASSES}


def classify_onboarding(files_touched: int) -> tuple[str, str]:
    if files_touched <= SIMPLE_FILES:
        return "Simple", "Excellent focused onboarding"
    if files_touched <= MODERATE_FILES:
        return "Moderate", "Reasonable onboarding complexity"
    if files_touched <= COMPLEX_FILES:
        return "Complex", "Consider simplifying initial tasks"
    return "Overwhelming", "Urgent: simplify onboarding process"


def first_commits(walker: HistoryWalker) -> dict[str, list[CommitRecord]]:
    """Every author's commits, oldest first by author time."""
    by_author: dict[str, list[CommitRecord]] = defaultdict(list)
    for commit in walker.commits():
        by_author[commit.author].append(commit)
    for commits in by_author.values():
        commits.sort(key=lambda c: (c.authored_at, c.hash))
    return by_author


def popular_files(contributors: list[NewContributor]) -> list[FilePopularity]:
    """Files touched by the most new contributors.

    Shares are relative to contributors who touched at least one file.
    """
    touching = sum(1 for c in contributors if c.files_touched > 0)
    counts = Counter(path for c in contributors for path in c.files)
    return [
        FilePopularity(path, n, percent(n, touching))
        for path, n in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


def analyze_onboarding(
    repo: GitRepository,
    since: Optional[datetime] = None,
    paths: Iterable[str] = (),
    commit_limit: int = DEFAULT_COMMIT_LIMIT,
) -> OnboardingReport:
    """Contributors whose first commit is at or after `since` (everyone when None)."""
    # Full history: a first commit is only "first" against everything before it.
    walker = HistoryWalker(repo, MergeStrategy.SKIP, paths=paths, skip_empty_email=True)

    report = OnboardingReport(commit_limit=commit_limit)
    for author, commits in first_commits(walker).items():
        first = commits[0].authored_at
        if since is not None and first < since:
            continue

        touched: set[str] = set()
        analyzed = 0
        for commit in commits[:commit_limit]:
            analyzed += 1
            try:
                change = walker.diff(commit)
            except GitCommandError as e:
                logger.warning("Skipping commit %s: %s", commit.short_hash, e)
                continue
            touched.update(f.path for f in change.files)

        status, recommendation = classify_onboarding(len(touched))
        report.contributors.append(
            NewContributor(
                author=author,
                first_commit_at=first,
                files_touched=len(touched),
                commits_analyzed=analyzed,
                status=status,
                recommendation=recommendation,
                files=sorted(touched),
            )
        )

    report.contributors.sort(key=lambda c: (c.first_commit_at, c.author), reverse=True)
    report.common_files = popular_files(report.contributors)
    return report
