"""Time windows, period buckets and small text helpers shared by the metrics."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..exceptions import InvalidDurationError

PERIODS = ("day", "week", "month")

# Human-readable forms for the windows people type most often.
_WINDOW_NAMES = {
    "1d": "last 1 day",
    "2d": "last 2 days",
    "3d": "last 3 days",
    "7d": "last 7 days",
    "14d": "last 14 days",
    "30d": "last 30 days",
    "1m": "last 1 month",
    "2m": "last 2 months",
    "3m": "last 3 months",
    "6m": "last 6 months",
    "1y": "last 1 year",
    "2y": "last 2 years",
    "3y": "last 3 years",
}

BINARY_SNIFF_BYTES = 8000


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def from_timestamp(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move `moment` back by whole calendar months, clamping the day."""
    index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def parse_duration(arg: str, now: Optional[datetime] = None) -> datetime:
    """Turn ``30d``/``6m``/``1y`` into the cutoff instant ``now - N units``.

    Raises:
        InvalidDurationError: for anything that is not ``<digits><d|m|y>``
    """
    now = now or utcnow()
    text = (arg or "").strip()
    if len(text) < 2:
        raise InvalidDurationError(arg, "invalid duration argument")

    number, unit = text[:-1], text[-1].lower()
    if not (number.isascii() and number.isdigit()):
        raise InvalidDurationError(arg, "invalid number in duration")
    if unit not in ("d", "m", "y"):
        raise InvalidDurationError(arg, "invalid unit")
    amount = int(number)

    try:
        if unit == "d":
            return now - timedelta(days=amount)
        if unit == "m":
            return shift_months(now, amount)
        return shift_months(now, amount * 12)
    except (ValueError, OverflowError) as exc:
        raise InvalidDurationError(arg, "duration out of range") from exc


def expand_time_window(arg: Optional[str]) -> str:
    if not arg:
        return "all time"
    return _WINDOW_NAMES.get(arg, f"last {arg}")


def title_case(text: str) -> str:
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def period_start(moment: datetime, period: str) -> datetime:
    """Start of the day/week/month bucket holding `moment` (weeks start Monday, UTC)."""
    moment = moment.astimezone(timezone.utc)
    day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "day":
        return day
    if period == "week":
        return day - timedelta(days=day.weekday())
    if period == "month":
        return day.replace(day=1)
    raise ValueError(f"unknown period: {period}")


def next_period(start: datetime, period: str) -> datetime:
    if period == "day":
        return start + timedelta(days=1)
    if period == "week":
        return start + timedelta(weeks=1)
    if period == "month":
        return shift_months(start, -1)
    raise ValueError(f"unknown period: {period}")


def months_between(earlier: Optional[datetime], later: datetime) -> int:
    """Whole calendar months from `earlier` to `later`; 0 for future or missing dates."""
    if earlier is None or earlier > later:
        return 0
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return max(months, 0)


def count_lines(text: str) -> int:
    lines = text.count("\n")
    if text and not text.endswith("\n"):
        lines += 1
    return lines


def is_empty_line(line: str) -> bool:
    return not line.strip()


def is_binary(data: bytes) -> bool:
    return b"\x00" in data[:BINARY_SNIFF_BYTES]


def format_size(size: int) -> str:
    """1536 -> '1.5 KB'."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1024
        if value < 1024 or unit == "TB":
            return f"{value:.1f} {unit}"
    return f"{size} B"


def first_line(message: str, width: int) -> str:
    """First line of a commit message, truncated to `width` with '...'."""
    line = message.splitlines()[0] if message else ""
    if len(line) > width:
        return line[: width - 3] + "..."
    return line
