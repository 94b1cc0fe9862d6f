"""New component creation rate, detected from added lines per language."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..exceptions import GitCommandError
from ..logging_config import get_logger
from ..temporal.models import TimePeriod
from ..temporal.paths import extension_of, matches_path_filter
from ..temporal.repository import GitRepository
from ..temporal.walker import HistoryWalker, MergeStrategy
from ..temporal.windows import next_period, period_start

logger = get_logger(__name__)

COMPONENT_CREATION_CONTEXT = (
    "Sudden spikes in component creation often indicate architectural sprawl "
    "or lack of design discipline."
)

# More new components than this in one month counts as a spike.
SPIKE_THRESHOLD = 10

JS_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx")


@dataclass(frozen=True)
class ComponentType:
    key: str
    name: str
    patterns: tuple[re.Pattern, ...]
    extensions: tuple[str, ...]
    description: str

    def count(self, text: str) -> int:
        return sum(len(p.findall(text)) for p in self.patterns)


COMPONENT_TYPES = {
    t.key: t
    for t in (
        ComponentType(
            "javascript-class",
            "JavaScript Class",
            (re.compile(r"class\s+\w+"),),
            JS_EXTENSIONS,
            "ES6+ classes and TypeScript classes",
        ),
        ComponentType(
            "react-component",
            "React Component",
            (
                re.compile(r"\bclass\s+\w+\s+extends\s+(?:React\.)?Component\b"),
                re.compile(r"return\s+\(<\w+"),
                re.compile(r"return\s+<\w+"),
            ),
            JS_EXTENSIONS,
            "React functional and class components",
        ),
        ComponentType(
            "ruby-model",
            "Ruby Model",
            (re.compile(r"\bclass\s+\w+\s*<\s*ApplicationRecord\b"),),
            (".rb",),
            "Rails ActiveRecord models",
        ),
        ComponentType(
            "ruby-controller",
            "Ruby Controller",
            (re.compile(r"\bclass\s+\w+Controller\s*<\s*ApplicationController\b"),),
            (".rb",),
            "Rails controllers",
        ),
        ComponentType(
            "ruby-service",
            "Ruby Service",
            (re.compile(r"class\s+\w+Service"), re.compile(r"class\s+\w+\s*<\s*Service")),
            (".rb",),
            "Ruby service objects",
        ),
        ComponentType(
            "python-class",
            "Python Class",
            (re.compile(r"class\s+\w+.*:"),),
            (".py",),
            "Python classes",
        ),
        ComponentType(
            "go-struct",
            "Go Struct",
            (re.compile(r"type\s+\w+\s+struct"),),
            (".go",),
            "Go structs",
        ),
        ComponentType(
            "go-interface",
            "Go Interface",
            (re.compile(r"type\s+\w+\s+interface"),),
            (".go",),
            "Go interfaces",
        ),
        ComponentType(
            "java-class",
            "Java Class",
            (re.compile(r"public\s+class\s+\w+"),),
            (".java",),
            "Java classes",
        ),
        ComponentType(
            "csharp-class",
            "C# Class",
            (re.compile(r"public\s+class\s+\w+"),),
            (".cs",),
            "C# classes",
        ),
    )
}

FRAMEWORK_EXTENSIONS = {
    "javascript": JS_EXTENSIONS,
    "ruby": (".rb",),
    "python": (".py",),
    "go": (".go",),
    "java": (".java",),
    "csharp": (".cs",),
}


@dataclass
class ComponentStats:
    component_type: str
    count: int = 0
    files: set[str] = field(default_factory=set)
    first_seen: Optional[datetime] = None
    last_seen: Optional[datetime] = None

    @property
    def name(self) -> str:
        return COMPONENT_TYPES[self.component_type].name

    def record(self, path: str, count: int, when: datetime) -> None:
        self.count += count
        self.files.add(path)
        if self.first_seen is None or when < self.first_seen:
            self.first_seen = when
        if self.last_seen is None or when > self.last_seen:
            self.last_seen = when


@dataclass
class ComponentReport:
    framework: Optional[str]
    components: list[ComponentStats] = field(default_factory=list)
    monthly: list[TimePeriod] = field(default_factory=list)

    @property
    def total_created(self) -> int:
        return sum(c.count for c in self.components)

    @property
    def spikes(self) -> list[TimePeriod]:
        return [p for p in self.monthly if p.count > SPIKE_THRESHOLD]


def detect_components(path: str, text: str) -> dict[str, int]:
    """Component type -> number of definitions found in `text`."""
    ext = extension_of(path)
    detected = {}
    for key, component in COMPONENT_TYPES.items():
        if ext not in component.extensions:
            continue
        n = component.count(text)
        if n:
            detected[key] = n
    return detected


def matches_framework(path: str, framework: Optional[str]) -> bool:
    if not framework:
        return True
    return extension_of(path) in FRAMEWORK_EXTENSIONS.get(framework, ())


def monthly_series(counts: Counter) -> list[TimePeriod]:
    if not counts:
        return []
    periods = []
    start, last = min(counts), max(counts)
    while start <= last:
        end = next_period(start, "month")
        periods.append(TimePeriod(start=start, end=end, count=counts.get(start, 0)))
        start = end
    return periods


def analyze_component_creation(
    repo: GitRepository,
    cutoff: Optional[datetime] = None,
    paths: Iterable[str] = (),
    framework: Optional[str] = None,
) -> ComponentReport:
    if framework and framework not in FRAMEWORK_EXTENSIONS:
        raise ValueError(f"unknown framework: {framework}")

    filters = [p for p in paths if p]
    walker = HistoryWalker(repo, MergeStrategy.FIRST_PARENT, cutoff=cutoff, skip_root=True)

    stats: dict[str, ComponentStats] = {}
    per_month: Counter = Counter()
    for commit in walker.commits():
        try:
            added = repo.added_lines(commit.hash, commit.parents[0])
        except GitCommandError as e:
            logger.warning("Skipping commit %s: %s", commit.short_hash, e)
            continue

        when = commit.committed_at
        for path, lines in added.items():
            if not lines or not matches_path_filter(path, filters):
                continue
            if not matches_framework(path, framework):
                continue
            for key, n in detect_components(path, "\n".join(lines)).items():
                stats.setdefault(key, ComponentStats(key)).record(path, n, when)
                per_month[period_start(when, "month")] += n

    components = sorted(stats.values(), key=lambda c: (-c.count, c.component_type))
    return ComponentReport(framework=framework, components=components, monthly=monthly_series(per_month))
