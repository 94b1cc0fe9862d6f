"""Dead zones: files nobody has touched for a long time."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..logging_config import get_logger
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ..temporal.windows import months_between, shift_months, utcnow
from ._common import INF, Band, classify, iter_head_texts, percent

logger = get_logger(__name__)

DEAD_ZONES_CONTEXT = (
    "Code age should guide architectural decisions; teams set context-specific "
    "thresholds (CodeScene)."
)

# Age assumed for files whose history cannot be found.
FALLBACK_AGE_MONTHS = 24


@dataclass
class DeadZoneFile:
    path: str
    last_modified: datetime
    age_months: int
    size: int
    risk: str
    recommendation: str


@dataclass
class DeadZoneReport:
    total_files: int = 0
    threshold_months: int = 12
    dead_zones: list[DeadZoneFile] = field(default_factory=list)

    @property
    def active_files(self) -> int:
        return self.total_files - len(self.dead_zones)

    @property
    def dead_zone_percent(self) -> float:
        return percent(len(self.dead_zones), self.total_files)

    def count(self, risk: str) -> int:
        return sum(1 for f in self.dead_zones if f.risk == risk)


def dead_zone_bands(months: int = 12, medium: int = 24, high: int = 36) -> tuple[Band, ...]:
    return (
        Band(months, "Active", "regularly maintained"),
        Band(medium, "Low Risk", "Consider reviewing"),
        Band(high, "Medium Risk", "Needs attention"),
        Band(INF, "High Risk", "Refactor or remove"),
    )


def classify_dead_zone(age_months: int, bands: tuple[Band, ...] = dead_zone_bands()) -> tuple[str, str]:
    result = classify(age_months, bands)
    return result.label, result.recommendation


def last_modified_times(
    repo: GitRepository, wanted: Iterable[str]
) -> dict[str, datetime]:
    """Committer time of the newest commit touching each wanted path.

    Walks history newest first and stops as soon as every path is resolved.
    """
    pending = set(wanted)
    found: dict[str, datetime] = {}
    if not pending:
        return found

    walker = HistoryWalker(repo, MergeStrategy.FIRST_PARENT)
    for change in walker.changes():
        for f in change.files:
            if f.path in pending:
                found[f.path] = change.commit.committed_at
                pending.discard(f.path)
        if not pending:
            break
    return found


def analyze_dead_zones(
    repo: GitRepository,
    paths: Iterable[str] = (),
    months: int = 12,
    medium_months: int = 24,
    high_months: int = 36,
    now: Optional[datetime] = None,
) -> DeadZoneReport:
    now = now or utcnow()
    bands = dead_zone_bands(months, medium_months, high_months)

    entries = [entry for entry, _ in iter_head_texts(repo, paths)]
    modified = last_modified_times(repo, (e.path for e in entries))

    report = DeadZoneReport(total_files=len(entries), threshold_months=months)
    for entry in entries:
        last = modified.get(entry.path)
        if last is None:
            logger.warning("No history found for %s, treating it as old", entry.path)
            last = shift_months(now, FALLBACK_AGE_MONTHS)

        age = months_between(last, now)
        if age < months:
            continue
        risk, recommendation = classify_dead_zone(age, bands)
        report.dead_zones.append(
            DeadZoneFile(
                path=entry.path,
                last_modified=last,
                age_months=age,
                size=entry.size,
                risk=risk,
                recommendation=recommendation,
            )
        )

    report.dead_zones.sort(key=lambda f: (-f.age_months, f.path))
    return report
