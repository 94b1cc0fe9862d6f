"""Shared pieces for the metric modules: banded classifiers and HEAD snapshots."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from ..logging_config import get_logger
from ..temporal.models import RiskClassification, TreeEntry
from ..temporal.paths import matches_path_filter
from ..temporal.repository import GitRepository
from ..temporal.windows import count_lines, is_binary

logger = get_logger(__name__)

UNKNOWN = "Unknown"
INF = math.inf


@dataclass(frozen=True)
class Band:
    """One bucket of a classifier: values below `upper` (and above the previous band)."""

    upper: float
    label: str
    recommendation: str = ""


def classify(value: float, bands: Sequence[Band]) -> RiskClassification:
    """Map `value` to the first band whose exclusive upper bound exceeds it.

    The last band should use math.inf; anything that falls through (NaN)
    lands in the last band so the mapping stays total.
    """
    for band in bands:
        if value < band.upper:
            return RiskClassification(band.label, band.recommendation)
    last = bands[-1]
    return RiskClassification(last.label, last.recommendation)


def percent(part: float, whole: float) -> float:
    """part / whole * 100, or 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return part / whole * 100


def ranked(order: Sequence[str]) -> dict[str, int]:
    """Sort-key table for ordinal labels; unlisted labels sort last."""
    return {label: i for i, label in enumerate(order)}


def head_entries(repo: GitRepository, paths: Iterable[str] = ()) -> list[TreeEntry]:
    filters = list(paths)
    return [e for e in repo.tree() if matches_path_filter(e.path, filters)]


def iter_head_texts(repo: GitRepository, paths: Iterable[str] = ()) -> Iterator[tuple[TreeEntry, str]]:
    """Non-binary in-scope HEAD files with their decoded content."""
    for entry, data in repo.iter_contents(head_entries(repo, paths)):
        if is_binary(data):
            continue
        yield entry, data.decode("utf-8", errors="replace")


def head_line_counts(repo: GitRepository, paths: Iterable[str] = ()) -> dict[str, int]:
    return {entry.path: count_lines(text) for entry, text in iter_head_texts(repo, paths)}

