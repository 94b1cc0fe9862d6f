"""Data models for git history analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class CommitRecord:
    hash: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    author: str  # canonical identity, see temporal.authors
    authored_at: datetime  # UTC
    committed_at: datetime  # UTC
    subject: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True)
class FileChange:
    path: str
    added: int
    deleted: int
    binary: bool = False

    @property
    def changed(self) -> int:
        return self.added + self.deleted


@dataclass
class CommitChanges:
    """One walked commit with its (filtered, merge-normalised) file changes."""

    commit: CommitRecord
    files: list[FileChange]
    # Totals below are ceiling-divided by the parent count for merges diffed
    # against every parent, so they can differ from sums over `files`.
    file_count: int
    additions: int
    deletions: int

    @property
    def lines_changed(self) -> int:
        return self.additions + self.deletions


@dataclass(frozen=True)
class TreeEntry:
    """A blob in a commit's tree."""

    path: str
    sha: str
    size: int


@dataclass
class TimePeriod:
    start: datetime  # inclusive
    end: datetime  # exclusive
    count: int = 0
    severity: Optional[str] = None
    ratio: float = 0.0  # count / baseline, set for spikes and dips


@dataclass(frozen=True)
class RefInfo:
    name: str  # full ref name, e.g. refs/heads/main
    target: str  # commit the ref resolves to
    created_at: Optional[datetime] = None  # tagger date for annotated tags, commit date otherwise

    @property
    def short_name(self) -> str:
        for prefix in ("refs/heads/", "refs/remotes/", "refs/tags/"):
            if self.name.startswith(prefix):
                return self.name[len(prefix):]
        return self.name


@dataclass(frozen=True)
class RiskClassification:
    label: str
    recommendation: str = ""


@dataclass
class Scope:
    """What a command was asked to look at."""

    command: str
    paths: list[str] = field(default_factory=list)
    paths_source: str = ""
    last: Optional[str] = None
    cutoff: Optional[datetime] = None
