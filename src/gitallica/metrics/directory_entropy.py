"""Directory entropy: how mixed the file types inside each directory are."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..math import Entropy, Statistics
from ..temporal.paths import directory_of, extension_of
from ..temporal.repository import GitRepository
from ._common import iter_head_texts

DIRECTORY_ENTROPY_CONTEXT = (
    "High entropy signals weak modularity and eroded boundaries. "
    "Clean directories have focused purpose."
)

NO_EXTENSION = "no-extension"
ROOT = "root"


@dataclass(frozen=True)
class ProjectType:
    name: str
    description: str
    root_extensions: tuple[str, ...]
    # directory -> allowed extensions; an empty tuple allows anything
    expected_dirs: dict[str, tuple[str, ...]] = field(default_factory=dict)

    def is_expected(self, directory: str, extension: str) -> bool:
        if directory in (ROOT, "."):
            return extension in self.root_extensions
        allowed = self.expected_dirs.get(directory)
        if allowed is None or not allowed:
            return True
        return extension in allowed


GO_PROJECT = ProjectType(
    name="Go CLI/Application",
    description="Go project with standard layout",
    root_extensions=(".go", ".mod", ".sum", ".md", ".txt", ".yml", ".yaml"),
    expected_dirs={
        "cmd": (".go",),
        "internal": (".go",),
        "pkg": (".go",),
        "docs": (".md", ".rst"),
        "scripts": (".sh", ".py", ".bat"),
        "configs": (".yml", ".yaml", ".json", ".toml"),
    },
)
NODE_PROJECT = ProjectType(
    name="Node.js Application",
    description="Node.js project with standard layout",
    root_extensions=(".js", ".json", ".md", ".txt", ".yml", ".yaml"),
    expected_dirs={
        "src": (".js", ".ts", ".jsx", ".tsx"),
        "lib": (".js", ".ts"),
        "test": (".js", ".ts"),
        "docs": (".md", ".rst"),
        "scripts": (".js", ".sh"),
        "config": (".js", ".json", ".yml"),
    },
)
PYTHON_PROJECT = ProjectType(
    name="Python Application",
    description="Python project with standard layout",
    root_extensions=(".py", ".txt", ".md", ".yml", ".yaml", ".cfg", ".ini"),
    expected_dirs={
        "src": (".py",),
        "tests": (".py",),
        "docs": (".md", ".rst"),
        "scripts": (".py", ".sh"),
        "config": (".py", ".yml", ".yaml", ".cfg"),
    },
)
RUBY_PROJECT = ProjectType(
    name="Ruby/Rails Application",
    description="Ruby/Rails project with standard layout",
    root_extensions=(".rb", ".gemspec", ".md", ".txt", ".yml", ".yaml"),
    expected_dirs={
        "app": (".rb", ".erb", ".haml"),
        "lib": (".rb",),
        "spec": (".rb",),
        "test": (".rb",),
        "config": (".rb", ".yml", ".yaml"),
        "docs": (".md", ".rst"),
    },
)
GENERIC_PROJECT = ProjectType(
    name="Generic Project",
    description="Generic project structure",
    root_extensions=(".md", ".txt", ".yml", ".yaml", ".json"),
    expected_dirs={
        "src": (),
        "docs": (".md", ".rst"),
        "scripts": (),
        "config": (),
    },
)


@dataclass
class DirectoryEntropy:
    path: str
    file_types: Counter = field(default_factory=Counter)
    unexpected_files: int = 0
    entropy: float = 0.0
    level: str = "Low"
    recommendation: str = ""

    @property
    def file_count(self) -> int:
        return sum(self.file_types.values())


@dataclass
class EntropyReport:
    project_type: ProjectType
    directories: list[DirectoryEntropy]
    average_entropy: float

    @property
    def high(self) -> list[DirectoryEntropy]:
        return [d for d in self.directories if d.level in ("Critical", "High")]

    @property
    def low(self) -> list[DirectoryEntropy]:
        return [d for d in self.directories if d.level == "Low"]


def detect_project_type(paths: Iterable[str]) -> ProjectType:
    extensions = set()
    root_files = set()
    for path in paths:
        if "/" not in path:
            root_files.add(path.lower())
        ext = extension_of(path)
        if ext:
            extensions.add(ext)

    if ".go" in extensions and "go.mod" in root_files:
        return GO_PROJECT
    if ".js" in extensions and "package.json" in root_files:
        return NODE_PROJECT
    if ".py" in extensions and root_files & {"requirements.txt", "pyproject.toml", "setup.py"}:
        return PYTHON_PROJECT
    if ".rb" in extensions and "gemfile" in root_files:
        return RUBY_PROJECT
    return GENERIC_PROJECT


def entropy_thresholds(average: float) -> tuple[float, float, float]:
    """(critical, high, medium) thresholds relative to the mean entropy."""
    return max(1.5, average * 1.8), max(1.0, average * 1.4), max(0.5, average * 0.9)


def classify_entropy(entropy: float, average: float, directory: str) -> tuple[str, str]:
    critical, high, medium = entropy_thresholds(average)

    if directory in (ROOT, "."):
        if entropy >= critical + 0.5:
            return "High", "Consider organizing: too many file types in root"
        if entropy >= high + 0.3:
            return "Medium", "Acceptable: root directory with mixed concerns"
        return "Low", "Good: well-organized root directory"

    if entropy >= critical:
        return "Critical", "Urgent refactoring needed: severe boundary violations"
    if entropy >= high:
        return "High", "Consider refactoring: mixed concerns detected"
    if entropy >= medium:
        return "Medium", "Monitor: some boundary erosion"
    return "Low", "Good: clear modular boundaries"


def analyze_directory_entropy(repo: GitRepository, paths: Iterable[str] = ()) -> EntropyReport:
    project_type = detect_project_type(e.path for e in repo.tree())

    dirs: dict[str, DirectoryEntropy] = {}
    for entry, _text in iter_head_texts(repo, paths):
        directory = directory_of(entry.path, root_label=ROOT)
        ext = extension_of(entry.path) or NO_EXTENSION
        stats = dirs.setdefault(directory, DirectoryEntropy(path=directory))
        stats.file_types[ext] += 1
        if not project_type.is_expected(directory, ext):
            stats.unexpected_files += 1

    for stats in dirs.values():
        stats.entropy = Entropy.shannon(stats.file_types)
    average = Statistics.mean([d.entropy for d in dirs.values()])
    for stats in dirs.values():
        stats.level, stats.recommendation = classify_entropy(stats.entropy, average, stats.path)

    ordered = sorted(dirs.values(), key=lambda d: (-d.entropy, d.path))
    return EntropyReport(project_type=project_type, directories=ordered, average_entropy=average)
