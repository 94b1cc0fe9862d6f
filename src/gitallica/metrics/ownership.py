"""Ownership clarity: how concentrated each file's commits are."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import UNKNOWN, ranked
from .bus_factor import sorted_contributors

OWNERSHIP_CONTEXT = (
    "Microsoft Research: Strong code ownership (one developer ≥80%) improves quality, "
    "while files with >9 contributors are 16x more likely to have vulnerabilities "
    "(Bird et al., MSR 2011)."
)

DEFAULT_WINDOW = "1y"
SMALL_TEAM = 3

STATUS_ORDER = ranked(["Critical", "Warning", "Caution", "Healthy", UNKNOWN])


@dataclass
class FileOwnership:
    path: str
    top_contributor: str
    top_share: float
    contributors: int
    status: str
    recommendation: str
    commits_by_author: dict[str, int] = field(default_factory=dict)


@dataclass
class OwnershipReport:
    files: list[FileOwnership]

    def count(self, status: str) -> int:
        return sum(1 for f in self.files if f.status == status)


def classify_ownership(
    top_share: float,
    contributors: int,
    strong_share: float = 0.80,
    max_contributors: int = 9,
) -> tuple[str, str]:
    if contributors <= 0:
        return UNKNOWN, "No contributors found"
    if contributors <= 1:
        return "Healthy", "Good ownership balance"
    if top_share >= strong_share:
        return "Healthy", "Strong ownership tends to improve quality"
    if contributors > max_contributors:
        return (
            "Critical",
            f"Too many contributors (>{max_contributors}) increases vulnerability risk 16x",
        )
    if contributors <= SMALL_TEAM:
        return "Caution", "Small team - consider knowledge sharing"
    return "Warning", "Multiple contributors without clear ownership"


def file_ownership(
    path: str,
    commits: Mapping[str, int],
    strong_share: float = 0.80,
    max_contributors: int = 9,
) -> FileOwnership:
    ordered = sorted_contributors(commits)
    total = sum(n for _, n in ordered)
    top_author, top_commits = ordered[0] if ordered else ("", 0)
    top_share = top_commits / total if total else 0.0
    status, recommendation = classify_ownership(
        top_share, len(ordered), strong_share, max_contributors
    )
    return FileOwnership(
        path=path,
        top_contributor=top_author,
        top_share=top_share,
        contributors=len(ordered),
        status=status,
        recommendation=recommendation,
        commits_by_author=dict(ordered),
    )


def sort_by_ownership_risk(files: Iterable[FileOwnership]) -> list[FileOwnership]:
    """Riskiest first; Critical/Warning by weakest owner, the rest by strongest."""

    def key(f: FileOwnership):
        share = f.top_share if f.status in ("Critical", "Warning") else -f.top_share
        return (STATUS_ORDER.get(f.status, len(STATUS_ORDER)), share, f.path)

    return sorted(files, key=key)


def analyze_ownership(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    strong_share: float = 0.80,
    max_contributors: int = 9,
) -> OwnershipReport:
    walker = HistoryWalker(
        repo, MergeStrategy.SKIP, cutoff=cutoff, paths=paths, skip_empty_email=True
    )

    per_file: dict[str, Counter[str]] = defaultdict(Counter)
    for change in walker.changes():
        for f in change.files:
            per_file[f.path][change.commit.author] += 1

    files = [
        file_ownership(path, commits, strong_share, max_contributors)
        for path, commits in per_file.items()
    ]
    return OwnershipReport(files=sort_by_ownership_risk(files))
