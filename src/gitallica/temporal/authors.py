"""Author identity normalization.

Every metric that groups by author (bus factor, ownership, onboarding,
cadence) keys its maps on the canonical string produced here, so the
function must stay pure: the same (name, email) always yields the same key.

Priority:
    1. configured mappings (pattern -> canonical email)
    2. the lower-cased email, unless it is a placeholder address
    3. the lower-cased name
    4. "unknown"
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

UNKNOWN_AUTHOR = "unknown"

# Fragments ending in "@" match the local part prefix; anything else matches
# the domain (exactly or as a parent domain).
PLACEHOLDER_PATTERNS: tuple[str, ...] = (
    "localhost",
    "example.com",
    "example.org",
    "test.com",
    "noreply@",
    "no-reply@",
    "user@",
    "admin@",
    "root@",
)

_NAME_TOKEN_RE = re.compile(r"[\w'-]+")


@dataclass(frozen=True)
class AuthorMapping:
    patterns: tuple[str, ...]
    canonical: str

    def matches(self, name: str, email: str) -> bool:
        wanted = {p.strip().lower() for p in self.patterns if p.strip()}
        if not wanted:
            return False
        local_part = email.strip().lower().split("@", 1)[0]
        if local_part and local_part in wanted:
            return True
        return any(token in wanted for token in _NAME_TOKEN_RE.findall(name.lower()))


def is_placeholder_email(email: str, patterns: Iterable[str] = PLACEHOLDER_PATTERNS) -> bool:
    """True for addresses that do not identify a person (noreply@, @localhost, ...)."""
    address = email.strip().lower()
    if not address:
        return False

    domain = address.rsplit("@", 1)[-1] if "@" in address else ""
    for pattern in patterns:
        pattern = pattern.strip().lower()
        if not pattern:
            continue
        if pattern.endswith("@"):
            if address.startswith(pattern):
                return True
        elif domain and (domain == pattern or domain.endswith("." + pattern)):
            return True
    return False


def normalize_author(
    name: str,
    email: str,
    placeholders: Iterable[str] = PLACEHOLDER_PATTERNS,
) -> str:
    """Canonical author key for a raw (name, email) pair."""
    name = (name or "").strip()
    email = (email or "").strip()

    if email and "@" in email and not is_placeholder_email(email, placeholders):
        return email.lower()
    if name:
        return name.lower()
    return UNKNOWN_AUTHOR


class AuthorNormalizer:
    """Applies configured mappings before the default normalization rules."""

    def __init__(
        self,
        mappings: Sequence[AuthorMapping] = (),
        extra_placeholders: Iterable[str] = (),
    ):
        self.mappings = tuple(mappings)
        self.placeholders = PLACEHOLDER_PATTERNS + tuple(extra_placeholders)

    def __call__(self, name: str, email: str) -> str:
        for mapping in self.mappings:
            if mapping.matches(name or "", email or ""):
                return mapping.canonical.strip().lower()
        return normalize_author(name, email, self.placeholders)
