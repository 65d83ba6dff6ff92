"""Decodes the line-oriented text that the AppleScript snippets return.

Scripts build their output by string concatenation: one record per line,
``|`` between fields, ``|||`` between the fields of a single detail record,
and ``,`` or ``;`` between the items of a multi-valued field. Nothing is
escaped on the way out, so a delimiter inside user content shifts the
fields of that record.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

FIELD_SEP = "|"
DETAIL_SEP = "|||"
ITEM_SEP = ","
ADDRESS_SEP = ";"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def split_records(raw: str | None, field_count: int) -> Iterator[list[str]]:
    """Yield the fields of each non-blank line that has at least ``field_count`` fields."""
    if not raw:
        return
    for line in raw.split("\n"):
        if not line.strip():
            continue
        parts = line.split(FIELD_SEP)
        if len(parts) < field_count:
            continue
        yield parts


def split_detail(raw: str | None, field_count: int) -> list[str]:
    """Split a ``|||`` record, padding missing trailing fields with ``""``."""
    parts = (raw or "").split(DETAIL_SEP)
    if len(parts) < field_count:
        parts.extend([""] * (field_count - len(parts)))
    return parts


def split_items(value: str | None, sep: str = ITEM_SEP) -> list[str]:
    return [item.strip() for item in (value or "").split(sep) if item.strip()]


def split_labeled(item: str) -> tuple[str, str]:
    """``"work:a@b.com"`` -> ``("work", "a@b.com")``."""
    label, _, value = item.partition(":")
    return label, value


def parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def parse_int(value: str | None, default: int = 0) -> int:
    """Parse a leading integer the way the host renders counts and sizes."""
    match = _LEADING_INT_RE.match(value or "")
    if not match:
        return default
    return int(match.group(1))
