"""Bus factor per directory, from lines added by each author."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..temporal.paths import directory_of
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ._common import UNKNOWN, percent, ranked

BUS_FACTOR_CONTEXT = (
    "Target bus factor of 25-50% of team size ensures collective ownership "
    "without accountability gaps (Martin Fowler)."
)

# Minimum bus factor counted as healthy under the team-relative rules.
HEALTHY_BUS_FACTOR = 4
MEDIUM_BUS_FACTOR = 3
CRITICAL_BUS_FACTOR = 1
SMALL_TEAM = 6

RISK_ORDER = ranked(["Critical", "High", "Medium", "Low", "Healthy", UNKNOWN])

RECOMMENDATIONS = {
    "Critical": "Urgent: spread knowledge, pair programming, documentation",
    "High": "Important: increase knowledge sharing and cross-training",
    "Medium": "Consider: encourage more contributors and code reviews",
    "Low": "Monitor: maintain current collaboration patterns",
    "Healthy": "Good: balanced knowledge distribution",
}


@dataclass
class Contributor:
    author: str
    lines: int
    percentage: float


@dataclass
class DirectoryBusFactor:
    path: str
    total_lines: int
    bus_factor: int
    risk_level: str
    recommendation: str
    contributors: int
    top_contributors: list[Contributor] = field(default_factory=list)


@dataclass
class BusFactorReport:
    directories: list[DirectoryBusFactor]
    overall_bus_factor: int
    overall_risk: str
    total_contributors: int

    @property
    def risky(self) -> list[DirectoryBusFactor]:
        return [d for d in self.directories if d.risk_level in ("Critical", "High")]

    @property
    def healthy(self) -> list[DirectoryBusFactor]:
        return [d for d in self.directories if d.risk_level == "Healthy"]


def sorted_contributors(contributions: Mapping[str, int]) -> list[tuple[str, int]]:
    """Contributors by contribution desc; ties broken by author for stable output."""
    return sorted(
        ((a, n) for a, n in contributions.items() if n > 0),
        key=lambda item: (-item[1], item[0]),
    )


def calculate_bus_factor(contributions: Mapping[str, int]) -> int:
    """Smallest number of top contributors whose combined share exceeds 50%."""
    ordered = sorted_contributors(contributions)
    total = sum(n for _, n in ordered)
    if total == 0:
        return 0

    accumulated = 0
    for bus_factor, (_, lines) in enumerate(ordered, start=1):
        accumulated += lines
        if accumulated * 2 > total:
            return bus_factor
    return len(ordered)


def classify_bus_factor(bus_factor: int, contributors: int, rules: str = "team-relative") -> str:
    """Risk level for a bus factor.

    team-relative: the healthy minimum is max(4, contributors // 4); larger
    teams (more than 6 people) escalate to High instead of Medium.
    flat: <=1 Critical, 2 High, 3-4 Medium, else Healthy.
    """
    if contributors <= 0 or bus_factor <= 0:
        return UNKNOWN

    if rules == "flat":
        if bus_factor <= 1:
            return "Critical"
        if bus_factor == 2:
            return "High"
        if bus_factor <= 4:
            return "Medium"
        return "Healthy"

    healthy_minimum = max(HEALTHY_BUS_FACTOR, contributors // 4)
    if bus_factor <= CRITICAL_BUS_FACTOR:
        return "Critical"
    if bus_factor <= MEDIUM_BUS_FACTOR and contributors > SMALL_TEAM:
        return "High"
    if bus_factor < healthy_minimum:
        return "Medium" if contributors <= SMALL_TEAM else "High"
    return "Healthy"


def recommendation_for(risk_level: str) -> str:
    return RECOMMENDATIONS.get(risk_level, "Review: assess contributor patterns")


def top_contributors(contributions: Mapping[str, int], limit: int = 5) -> list[Contributor]:
    total = sum(contributions.values())
    return [
        Contributor(author, lines, percent(lines, total))
        for author, lines in sorted_contributors(contributions)[:limit]
    ]


def directory_stats(
    path: str, contributions: Mapping[str, int], rules: str = "team-relative"
) -> DirectoryBusFactor:
    bus_factor = calculate_bus_factor(contributions)
    contributors = len([n for n in contributions.values() if n > 0])
    risk = classify_bus_factor(bus_factor, contributors, rules)
    return DirectoryBusFactor(
        path=path,
        total_lines=sum(contributions.values()),
        bus_factor=bus_factor,
        risk_level=risk,
        recommendation=recommendation_for(risk),
        contributors=contributors,
        top_contributors=top_contributors(contributions),
    )


def sort_by_risk(dirs: Iterable[DirectoryBusFactor]) -> list[DirectoryBusFactor]:
    return sorted(
        dirs,
        key=lambda d: (RISK_ORDER.get(d.risk_level, len(RISK_ORDER)), d.bus_factor, d.path),
    )


def analyze_bus_factor(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    depth: int = 1,
    rules: str = "team-relative",
) -> BusFactorReport:
    walker = HistoryWalker(repo, MergeStrategy.SKIP, cutoff=cutoff, paths=paths)

    by_directory: dict[str, Counter[str]] = defaultdict(Counter)
    overall: Counter[str] = Counter()
    for change in walker.changes():
        author = change.commit.author
        for f in change.files:
            if f.added <= 0:
                continue
            by_directory[directory_of(f.path, depth)][author] += f.added
            overall[author] += f.added

    dirs = sort_by_risk(directory_stats(p, c, rules) for p, c in by_directory.items())
    overall_bf = calculate_bus_factor(overall)
    contributors = len(overall)
    return BusFactorReport(
        directories=dirs,
        overall_bus_factor=overall_bf,
        overall_risk=classify_bus_factor(overall_bf, contributors, rules),
        total_contributors=contributors,
    )
