"""Git history access: repository adapter, walker and shared helpers."""

from .authors import AuthorMapping, AuthorNormalizer, normalize_author
from .models import (
    CommitChanges,
    CommitRecord,
    FileChange,
    RefInfo,
    RiskClassification,
    Scope,
    TimePeriod,
    TreeEntry,
)
from .paths import matches_path_filter
from .repository import GitRepository
from .walker import HistoryWalker, MergeStrategy, merge_adjusted

__all__ = [
    "AuthorMapping",
    "AuthorNormalizer",
    "CommitChanges",
    "CommitRecord",
    "FileChange",
    "GitRepository",
    "HistoryWalker",
    "MergeStrategy",
    "RefInfo",
    "RiskClassification",
    "Scope",
    "TimePeriod",
    "TreeEntry",
    "matches_path_filter",
    "merge_adjusted",
    "normalize_author",
]
