"""Commit cadence: commits per period, trend, spikes, dips and sustainability."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..math import Statistics
from ..temporal.models import TimePeriod
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ..temporal.windows import next_period, period_start
from ._common import UNKNOWN

CADENCE_CONTEXT = (
    "Track trends, not absolutes - spikes/dips may reveal crunch, burnout, "
    "or stagnation (Kent Beck)."
)

STABLE_SLOPE = 0.1
SPIKE_MULTIPLIER = 2.0
DIP_MULTIPLIER = 0.3
MIN_PERIODS_FOR_OUTLIERS = 5
MAX_PERIODS = 1000

HEALTHY_AVG_LOW = 5.0
HEALTHY_AVG_HIGH = 25.0
WARNING_SPIKES = 2
CRITICAL_SPIKES = 3

RECOMMENDATIONS = {
    "Critical": [
        "URGENT: High spike/dip volatility suggests unsustainable pace",
        "Consider workload balancing and process improvements",
        "Review team capacity and project planning",
    ],
    "Warning": [
        "Multiple spikes detected - monitor for crunch periods",
        "Consider more consistent development pace",
        "Review sprint planning and task estimation",
    ],
    "Caution": ["Some concerning patterns detected"],
    "Healthy": [
        "Good sustainable development pace!",
        "Continue current practices and monitor trends",
    ],
    UNKNOWN: [
        "Insufficient data for sustainability assessment",
        "Consider analyzing a longer time period",
    ],
}


@dataclass
class CadenceReport:
    period: str
    periods: list[TimePeriod] = field(default_factory=list)
    total_commits: int = 0
    average: float = 0.0
    trend: str = UNKNOWN
    trend_strength: float = 0.0
    sustainability: str = UNKNOWN
    spikes: list[TimePeriod] = field(default_factory=list)
    dips: list[TimePeriod] = field(default_factory=list)

    def recommendations(self) -> list[str]:
        advice = list(RECOMMENDATIONS.get(self.sustainability, []))
        if self.sustainability == "Caution":
            if self.trend == "Decreasing":
                advice.append("Decreasing trend may indicate reduced team velocity")
            if self.dips:
                advice.append("Low activity periods may indicate blockers or burnout")
        if self.average > 0:
            if self.average < HEALTHY_AVG_LOW:
                advice.append(
                    f"Low average pace ({self.average:.1f} commits/{self.period}) - consider if adequate"
                )
            elif self.average > HEALTHY_AVG_HIGH:
                advice.append(
                    f"High average pace ({self.average:.1f} commits/{self.period}) - ensure sustainability"
                )
        return advice


def bucket_commits(timestamps: Iterable[datetime], period: str) -> list[TimePeriod]:
    """Zero-filled, contiguous periods from the earliest to the latest timestamp.

    Longer series are cut to the newest MAX_PERIODS periods.
    """
    counts = Counter(period_start(ts, period) for ts in timestamps)
    if not counts:
        return []

    periods = []
    start = min(counts)
    last = max(counts)
    while start <= last:
        end = next_period(start, period)
        periods.append(TimePeriod(start=start, end=end, count=counts.get(start, 0)))
        start = end
    return periods[-MAX_PERIODS:]


def classify_trend(slope: float) -> tuple[str, float]:
    strength = abs(slope)
    if strength <= STABLE_SLOPE:
        return "Stable", strength
    return ("Increasing" if slope > 0 else "Decreasing"), strength


def _baseline(periods: Sequence[TimePeriod]) -> float:
    if len(periods) < MIN_PERIODS_FOR_OUTLIERS:
        return 0.0
    return Statistics.median([p.count for p in periods])


def spike_severity(ratio: float) -> str:
    if ratio >= 2.5:
        return "High"
    if ratio >= 2.0:
        return "Medium"
    return "Low"


def dip_severity(ratio: float) -> str:
    if ratio < 0.15:
        return "High"
    if ratio < 0.25:
        return "Medium"
    return "Low"


def detect_spikes(periods: Sequence[TimePeriod]) -> list[TimePeriod]:
    """Periods with more than twice the median count."""
    baseline = _baseline(periods)
    if baseline == 0:
        return []
    spikes = []
    for p in periods:
        if p.count > baseline * SPIKE_MULTIPLIER:
            ratio = p.count / baseline
            spikes.append(TimePeriod(p.start, p.end, p.count, spike_severity(ratio), ratio))
    return spikes


def detect_dips(periods: Sequence[TimePeriod]) -> list[TimePeriod]:
    """Periods with less than 30% of the median count."""
    baseline = _baseline(periods)
    if baseline == 0:
        return []
    dips = []
    for p in periods:
        if p.count < baseline * DIP_MULTIPLIER:
            ratio = p.count / baseline
            dips.append(TimePeriod(p.start, p.end, p.count, dip_severity(ratio), ratio))
    return dips


def classify_sustainability(average: float, spikes: int, dips: int, trend: str) -> str:
    if spikes >= CRITICAL_SPIKES and dips >= 2:
        return "Critical"
    if average > HEALTHY_AVG_HIGH and spikes >= WARNING_SPIKES:
        return "Critical"
    if spikes >= WARNING_SPIKES:
        return "Warning"
    if average > HEALTHY_AVG_HIGH and trend == "Increasing":
        return "Warning"
    if dips >= 2:
        return "Caution"
    if average < HEALTHY_AVG_LOW and trend == "Decreasing":
        return "Caution"
    if trend == "Decreasing" and (spikes > 0 or dips > 0):
        return "Caution"
    if HEALTHY_AVG_LOW <= average <= HEALTHY_AVG_HIGH:
        if spikes <= 1 and dips <= 1 and trend != "Decreasing":
            return "Healthy"
    return "Caution"


def cadence_stats(periods: list[TimePeriod], period: str) -> CadenceReport:
    report = CadenceReport(period=period, periods=periods)
    if not periods:
        return report

    counts = [p.count for p in periods]
    report.total_commits = sum(counts)
    report.average = report.total_commits / len(periods)
    if len(periods) >= 2:
        report.trend, report.trend_strength = classify_trend(Statistics.linear_slope(counts))
    report.spikes = detect_spikes(periods)
    report.dips = detect_dips(periods)
    report.sustainability = classify_sustainability(
        report.average, len(report.spikes), len(report.dips), report.trend
    )
    return report


def analyze_cadence(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    period: str = "week",
) -> CadenceReport:
    paths = list(paths)
    walker = HistoryWalker(
        repo,
        MergeStrategy.SKIP,
        cutoff=cutoff,
        paths=paths,
        use_author_time=True,
        stop_at_cutoff=False,
        skip_empty_email=True,
    )

    if paths:
        timestamps = [c.commit.authored_at for c in walker.changes() if c.file_count > 0]
    else:
        timestamps = [c.authored_at for c in walker.commits()]
    return cadence_stats(bucket_commits(timestamps, period), period)
