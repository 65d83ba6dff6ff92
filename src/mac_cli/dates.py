"""Natural-language date parsing and the date renderings used on both sides
of the AppleScript boundary.

Input phrases understood by :func:`parse_date`:

- ``today``, ``tomorrow``, ``yesterday``
- ``next <weekday>`` (always strictly after today)
- ``in N days``
- anything :func:`dateutil.parser.parse` accepts (``2026-01-20``,
  ``Jan 20 2026 3pm``, ...)
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from dateutil import parser as date_parser

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

_NEXT_WEEKDAY_RE = re.compile(r"^next\s+(" + "|".join(WEEKDAYS) + r")$")
_IN_DAYS_RE = re.compile(r"^in\s+(\d+)\s+days?$")
_HOST_AT_RE = re.compile(r"\s+at\s+")


def _from_phrase(lowered: str, now: datetime) -> datetime | None:
    if lowered == "today":
        return now
    if lowered == "tomorrow":
        return now + timedelta(days=1)
    if lowered == "yesterday":
        return now - timedelta(days=1)

    match = _NEXT_WEEKDAY_RE.match(lowered)
    if match:
        target = WEEKDAYS.index(match.group(1))
        days_until = target - now.weekday()
        if days_until <= 0:
            days_until += 7
        return now + timedelta(days=days_until)

    match = _IN_DAYS_RE.match(lowered)
    if match:
        return now + timedelta(days=int(match.group(1)))
    return None


def parse_date(text: str, now: datetime | None = None) -> datetime:
    """Parse a user-supplied date phrase relative to ``now``.

    Raises:
        ValueError: if the phrase is neither a known phrase nor a date
            string dateutil understands, or lands outside the datetime range.
    """
    now = now or datetime.now()
    lowered = text.lower().strip()

    try:
        phrased = _from_phrase(lowered, now)
    except OverflowError as exc:
        raise ValueError(f"Could not parse date: {text}") from exc
    if phrased is not None:
        return phrased

    if not lowered:
        raise ValueError(f"Could not parse date: {text}")
    try:
        # Missing components come from midnight today, so "2026-01-20" is 00:00.
        default = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return date_parser.parse(text.strip(), default=default)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Could not parse date: {text}") from exc


def apply_time(dt: datetime, time_text: str) -> datetime:
    """Set the clock time of ``dt`` from ``"HH:MM"``; missing parts become 0."""
    pieces = (time_text or "").split(":")

    def _part(idx: int) -> int:
        try:
            return int(pieces[idx])
        except (IndexError, ValueError):
            return 0

    hours, minutes = _part(0), _part(1)
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59:
        raise ValueError(f"Invalid time: {time_text}")
    return dt.replace(hour=hours, minute=minutes, second=0, microsecond=0)


def format_time(dt: datetime) -> str:
    """``2:05 PM``"""
    return f"{dt.hour % 12 or 12}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def format_applescript_date(dt: datetime) -> str:
    """The text that goes inside an AppleScript ``date "..."`` literal."""
    return f"{dt.strftime('%B')} {dt.day}, {dt.year} {format_time(dt)}"


def format_relative(dt: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now()
    if dt.date() == now.date():
        return f"Today at {format_time(dt)}"
    if dt.date() == (now + timedelta(days=1)).date():
        return f"Tomorrow at {format_time(dt)}"
    return f"{dt.strftime('%a, %b')} {dt.day}, {format_time(dt)}"


def format_short_date(dt: datetime) -> str:
    """``1/20/2026``"""
    return f"{dt.month}/{dt.day}/{dt.year}"


def format_day_heading(dt: datetime) -> str:
    """``Tuesday, Jan 20``"""
    return f"{dt.strftime('%A, %b')} {dt.day}"


def format_long_day(dt: datetime) -> str:
    """``Tuesday, January 20``"""
    return f"{dt.strftime('%A, %B')} {dt.day}"


def parse_host_date(text: str | None) -> datetime | None:
    """Parse a ``date as text`` rendering such as
    ``Tuesday, January 20, 2026 at 2:30:00 PM``. Returns None when unparseable.
    """
    if not text or not text.strip():
        return None
    cleaned = _HOST_AT_RE.sub(" ", text.strip()).replace(",", "")
    try:
        return date_parser.parse(cleaned)
    except (ValueError, OverflowError):
        return None
