"""Commit-history fold: walk commits, diff them, filter paths, normalize merges.

Each metric picks a MergeStrategy:

- SKIP: merge commits are dropped entirely.
- FIRST_PARENT: merges are diffed against their first parent only.
- ALL_PARENTS: merges are diffed against every parent and the summed counts
  are ceiling-divided by the number of parents.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import datetime
from enum import Enum
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from .models import CommitChanges, CommitRecord, FileChange
from .paths import matches_path_filter
from .repository import GitRepository

logger = get_logger(__name__)


class MergeStrategy(Enum):
    SKIP = "skip"
    FIRST_PARENT = "first-parent"
    ALL_PARENTS = "all-parents"


def merge_adjusted(value: int, parent_count: int) -> int:
    """Ceiling-divide `value` by `parent_count` for merges; identity otherwise."""
    if parent_count > 1:
        return -(-value // parent_count)
    return value


class HistoryWalker:
    """Newest-first traversal of the history reachable from a revision.

    With `stop_at_cutoff` (the default) the walk ends at the first commit
    older than `cutoff`; git lists commits by date so older ancestors are
    not visited. Metrics that need an exact window pass
    `stop_at_cutoff=False` and the cutoff becomes a plain filter.
    """

    def __init__(
        self,
        repo: GitRepository,
        merges: MergeStrategy = MergeStrategy.SKIP,
        cutoff: Optional[datetime] = None,
        paths: Iterable[str] = (),
        rev: Optional[str] = None,
        use_author_time: bool = False,
        stop_at_cutoff: bool = True,
        skip_empty_email: bool = False,
        skip_root: bool = False,
    ):
        self.repo = repo
        self.merges = merges
        self.cutoff = cutoff
        self.paths = [p for p in paths if p and p.strip()]
        self.rev = rev
        self.use_author_time = use_author_time
        self.stop_at_cutoff = stop_at_cutoff
        self.skip_empty_email = skip_empty_email
        self.skip_root = skip_root

    def timestamp(self, commit: CommitRecord) -> datetime:
        return commit.authored_at if self.use_author_time else commit.committed_at

    def commits(self) -> Iterator[CommitRecord]:
        """Commits that pass the merge, window and author filters."""
        for commit in self.repo.iter_commits(self.rev):
            if self.cutoff is not None and self.timestamp(commit) < self.cutoff:
                if self.stop_at_cutoff:
                    return
                continue
            if commit.is_merge and self.merges is MergeStrategy.SKIP:
                continue
            if commit.is_root and self.skip_root:
                continue
            if self.skip_empty_email and not commit.author_email.strip():
                continue
            yield commit

    def changes(self) -> Iterator[CommitChanges]:
        """Yield each walked commit with its in-scope file changes.

        A commit whose diff cannot be computed is logged and skipped.
        """
        for commit in self.commits():
            try:
                yield self.diff(commit)
            except GitCommandError as e:
                logger.warning("Skipping commit %s: %s", commit.short_hash, e)

    def diff(self, commit: CommitRecord) -> CommitChanges:
        if commit.is_merge and self.merges is MergeStrategy.ALL_PARENTS:
            return self._diff_all_parents(commit)

        parent = commit.parents[0] if commit.parents else None
        files = self._in_scope(self.repo.numstat(commit.hash, parent))
        return CommitChanges(
            commit=commit,
            files=files,
            file_count=len(files),
            additions=sum(f.added for f in files),
            deletions=sum(f.deleted for f in files),
        )

    def _diff_all_parents(self, commit: CommitRecord) -> CommitChanges:
        n = len(commit.parents)
        added: dict[str, int] = {}
        deleted: dict[str, int] = {}
        binary: set[str] = set()
        entries = 0

        for parent in commit.parents:
            for change in self._in_scope(self.repo.numstat(commit.hash, parent)):
                entries += 1
                added[change.path] = added.get(change.path, 0) + change.added
                deleted[change.path] = deleted.get(change.path, 0) + change.deleted
                if change.binary:
                    binary.add(change.path)

        files = [
            FileChange(
                path=path,
                added=merge_adjusted(added[path], n),
                deleted=merge_adjusted(deleted[path], n),
                binary=path in binary,
            )
            for path in added
        ]
        return CommitChanges(
            commit=commit,
            files=files,
            file_count=merge_adjusted(entries, n),
            additions=merge_adjusted(sum(added.values()), n),
            deletions=merge_adjusted(sum(deleted.values()), n),
        )

    def _in_scope(self, changes: list[FileChange]) -> list[FileChange]:
        if not self.paths:
            return changes
        return [c for c in changes if matches_path_filter(c.path, self.paths)]
