"""Path filtering and directory helpers for repository-relative paths."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable


def normalize_path(path: str) -> str:
    """Normalise separators and `.`/`..` segments; always returns a posix path."""
    cleaned = posixpath.normpath(path.replace("\\", "/"))
    if cleaned in (".", "/"):
        return "."
    return cleaned.lstrip("/")


def matches_path_filter(path: str, filters: Iterable[str]) -> bool:
    """Return True if `path` equals a filter or lies inside a filter directory.

    An empty filter set (or one holding only empty strings) matches every
    path. Matching is directory-boundary aware: filter ``test`` matches
    ``test/a.go`` but not ``testing/a.go``.
    """
    active = [normalize_path(f) for f in filters if f and f.strip()]
    if not active:
        return True

    candidate = normalize_path(path)
    for flt in active:
        if flt == "." or candidate == flt or candidate.startswith(flt + "/"):
            return True
    return False


def directory_of(path: str, depth: int = 0, root_label: str = "root") -> str:
    """Directory key for `path`.

    depth 0 means the full parent directory; depth N keeps only the first N
    segments. Top-level files map to `root_label`.
    """
    parent = posixpath.dirname(normalize_path(path))
    if not parent or parent == ".":
        return root_label
    if depth > 0:
        parent = "/".join(parent.split("/")[:depth])
    return parent


def extension_of(path: str) -> str:
    """Lower-cased extension including the dot, or '' when there is none."""
    return posixpath.splitext(posixpath.basename(path))[1].lower()
