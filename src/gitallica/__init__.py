"""
gitallica - code health metrics from git history

Read-only statistics over a repository's commits: churn, bus factor,
ownership, commit cadence and size, DORA lead time, branch longevity,
dead zones, directory entropy, onboarding footprint and an aggregate
health check.
"""

__version__ = "0.1.0"

from .config import GitallicaConfig, ThresholdConfig, load_config
from .temporal import GitRepository, HistoryWalker, MergeStrategy

__all__ = [
    "GitallicaConfig",
    "ThresholdConfig",
    "load_config",
    "GitRepository",
    "HistoryWalker",
    "MergeStrategy",
]
