"""Health check: run the core metrics and keep only what needs attention."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from ..config import DEFAULT_THRESHOLDS, ThresholdConfig
from ..logging_config import get_logger
from ..temporal.repository import GitRepository
from ..temporal.windows import utcnow
from ._common import UNKNOWN
from .bus_factor import analyze_bus_factor
from .churn import analyze_churn
from .commit_size import analyze_commit_sizes
from .dead_zones import analyze_dead_zones
from .test_ratio import analyze_test_ratio

logger = get_logger(__name__)

SEVERITY_SCORES = {
    "Critical": 100,
    "High": 75,
    "Medium": 50,
    "Low": 25,
    "Warning": 60,
    "Caution": 40,
}

CATEGORIES = {
    "churn": "Code Stability",
    "churn-files": "Code Stability",
    "survival": "Code Stability",
    "bus-factor": "Knowledge Management",
    "ownership-clarity": "Knowledge Management",
    "test-ratio": "Code Quality",
    "high-risk-commits": "Code Quality",
    "dead-zones": "Technical Debt",
    "directory-entropy": "Technical Debt",
    "commit-cadence": "Development Practices",
    "commit-size": "Development Practices",
    "change-lead-time": "DORA Performance",
    "long-lived-branches": "DORA Performance",
}

PENALTIES = {"Critical": 25, "High": 15, "Medium": 8, "Low": 3}
SEVERITY_MARKERS = {"Critical": "🔴", "High": "🟠", "Medium": "🟡", "Low": "🔵"}

CHURN_MEDIUM = 15.0
CHURN_HIGH = 30.0
TEST_RATIO_CRITICAL = 0.25
TEST_RATIO_HIGH = 0.5

SOLO_RECOMMENDATION = (
    "Consider: This is normal for solo projects. Plan for knowledge sharing as team grows."
)


@dataclass
class HealthIssue:
    category: str
    metric: str
    severity: str
    score: int
    description: str
    recommendation: str
    details: str = ""


@dataclass
class HealthReport:
    issues: list[HealthIssue] = field(default_factory=list)
    analyzed_at: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.issues)

    def count(self, severity: str) -> int:
        return sum(1 for i in self.issues if i.severity == severity)

    @property
    def health_score(self) -> int:
        return aggregate_score(self.issues)

    @property
    def health_label(self) -> str:
        return classify_health_score(self.health_score)

    def by_category(self) -> dict[str, list[HealthIssue]]:
        groups: dict[str, list[HealthIssue]] = {}
        for issue in self.issues:
            groups.setdefault(issue.category, []).append(issue)
        return groups

    def top(self, n: int = 3) -> list[HealthIssue]:
        return self.issues[:n]

    def summary(self) -> str:
        return health_summary(Counter(i.severity for i in self.issues))


def severity_score(severity: str) -> int:
    return SEVERITY_SCORES.get(severity, 0)


def category_for(metric: str) -> str:
    return CATEGORIES.get(metric, "General")


def make_issue(metric: str, severity: str, description: str, recommendation: str, details: str = "") -> HealthIssue:
    return HealthIssue(
        category=category_for(metric),
        metric=metric,
        severity=severity,
        score=severity_score(severity),
        description=description,
        recommendation=recommendation,
        details=details,
    )


def aggregate_score(issues: Iterable[HealthIssue]) -> int:
    return max(0, 100 - sum(PENALTIES.get(i.severity, 0) for i in issues))


def classify_health_score(score: int) -> str:
    if score >= 85:
        return "Healthy"
    if score >= 70:
        return "Caution"
    if score >= 50:
        return "Warning"
    return "Critical"


def _plural(n: int, singular: str, plural: str) -> str:
    return singular if n == 1 else plural


def health_summary(counts: Counter) -> str:
    if not sum(counts.values()):
        return "✅ Excellent! No significant issues detected. Your codebase appears healthy."

    parts = []
    critical, high = counts.get("Critical", 0), counts.get("High", 0)
    medium, low = counts.get("Medium", 0), counts.get("Low", 0)
    if critical:
        parts.append(
            f"🚨 {critical} critical {_plural(critical, 'issue', 'issues')} "
            f"{_plural(critical, 'requires', 'require')} immediate attention."
        )
    if high:
        parts.append(
            f"⚠️ {high} high-priority {_plural(high, 'issue', 'issues')} should be addressed soon."
        )
    if medium:
        parts.append(
            f"📋 {medium} medium-priority {_plural(medium, 'issue', 'issues')} "
            f"{_plural(medium, 'needs', 'need')} attention."
        )
    if low:
        parts.append(
            f"💡 {low} low-priority {_plural(low, 'issue', 'issues')} can be addressed when convenient."
        )
    return " ".join(parts)


# ----------------------------------------------------------------------
# individual checks
# ----------------------------------------------------------------------


def churn_issues(repo: GitRepository, cutoff: Optional[datetime], paths: list[str]) -> list[HealthIssue]:
    report = analyze_churn(repo, cutoff, paths)
    if report.status == UNKNOWN or report.churn_percent < CHURN_MEDIUM:
        return []
    severity = "High" if report.churn_percent >= CHURN_HIGH else "Medium"
    return [
        make_issue(
            "churn",
            severity,
            f"High code churn detected: {report.churn_percent:.1f}%",
            "Review recent changes for architectural instability or frequent refactoring needs",
            f"Additions: {report.additions}, Deletions: {report.deletions}, Total LOC: {report.total_loc}",
        )
    ]


def test_ratio_issues(repo: GitRepository, paths: list[str]) -> list[HealthIssue]:
    report = analyze_test_ratio(repo, paths)
    if report.status == UNKNOWN or report.ratio >= TEST_RATIO_HIGH:
        return []
    severity = "Critical" if report.ratio < TEST_RATIO_CRITICAL else "High"
    return [
        make_issue(
            "test-ratio",
            severity,
            f"Low test coverage: {report.ratio:.2f}:1 ratio",
            "Increase test coverage significantly",
            f"Test LOC: {report.test_loc}, Source LOC: {report.source_loc}",
        )
    ]


def bus_factor_issues(
    repo: GitRepository, cutoff: Optional[datetime], paths: list[str], rules: str
) -> list[HealthIssue]:
    report = analyze_bus_factor(repo, cutoff, paths, rules=rules)
    issues = []
    for d in report.risky:
        recommendation = SOLO_RECOMMENDATION if d.contributors == 1 else d.recommendation
        issues.append(
            make_issue(
                "bus-factor",
                d.risk_level,
                f"Knowledge concentration risk in {d.path}",
                recommendation,
                f"Bus factor: {d.bus_factor}, Contributors: {d.contributors}",
            )
        )
    return issues


def project_age(repo: GitRepository, now: datetime) -> Optional[timedelta]:
    roots = repo.root_commit_times()
    if not roots:
        return None
    return now - min(roots)


def dead_zone_issues(
    repo: GitRepository, paths: list[str], thresholds: ThresholdConfig, now: datetime
) -> list[HealthIssue]:
    age = project_age(repo, now)
    if age is not None and age < timedelta(days=thresholds.new_project_days):
        logger.info("Repository is younger than %d days, skipping dead zones", thresholds.new_project_days)
        return []

    report = analyze_dead_zones(
        repo,
        paths,
        months=thresholds.dead_zone_months,
        medium_months=thresholds.dead_zone_medium_months,
        high_months=thresholds.dead_zone_high_months,
        now=now,
    )
    high_risk = report.count("High Risk")
    if not high_risk:
        return []
    return [
        make_issue(
            "dead-zones",
            "Medium",
            f"{high_risk} high-risk dead zone files detected",
            "Review and refactor or remove stale code",
            f"Total dead zones: {len(report.dead_zones)} ({report.dead_zone_percent:.1f}% of codebase)",
        )
    ]


def commit_size_issues(repo: GitRepository, cutoff: Optional[datetime], paths: list[str]) -> list[HealthIssue]:
    commits = analyze_commit_sizes(repo, cutoff, paths)
    critical = sum(1 for c in commits if c.risk == "Critical")
    high = sum(1 for c in commits if c.risk == "High")
    if not critical and not high:
        return []
    return [
        make_issue(
            "commit-size",
            "High" if critical else "Medium",
            f"Large commits detected: {critical} critical, {high} high-risk",
            "Break down large commits into smaller, focused changes",
            "Large commits reduce review effectiveness and increase rollback risk",
        )
    ]


def run_health_check(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    thresholds: ThresholdConfig = DEFAULT_THRESHOLDS,
    now: Optional[datetime] = None,
) -> HealthReport:
    now = now or utcnow()
    paths = [p for p in paths if p]

    issues: list[HealthIssue] = []
    issues += churn_issues(repo, cutoff, paths)
    issues += test_ratio_issues(repo, paths)
    issues += bus_factor_issues(repo, cutoff, paths, thresholds.bus_factor_rules)
    issues += dead_zone_issues(repo, paths, thresholds, now)
    issues += commit_size_issues(repo, cutoff, paths)

    # stable sort keeps check order within a score
    issues.sort(key=lambda i: -i.score)
    return HealthReport(issues=issues, analyzed_at=now)
