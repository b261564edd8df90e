"""Calendar-date normalization for trade records.

Trades arrive with exit and entry dates in whatever shape the backend or a
form produced: plain ``YYYY-MM-DD`` strings, ISO timestamps, ``date`` or
``datetime`` objects, or other ISO 8601 spellings. Each value is classified
once into a ``DateInput`` variant and reduced to a canonical ``YYYY-MM-DD``
key. Keys compare lexicographically in chronological order.

Timestamps are never shifted between timezones: the calendar date written in
the value is the date that counts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Union

DISPLAY_FORMAT = "%m/%d/%Y"

# Sorts after every real exit date.
MAX_DATE = date.max

_PLAIN_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class PlainDate:
    text: str


@dataclass(frozen=True)
class IsoTimestamp:
    text: str


@dataclass(frozen=True)
class NativeDate:
    value: date


@dataclass(frozen=True)
class FreeformDate:
    text: str


@dataclass(frozen=True)
class Unparseable:
    raw: Any


DateInput = Union[PlainDate, IsoTimestamp, NativeDate, FreeformDate, Unparseable]


def classify_date(value: Any) -> DateInput:
    if value is None or value == "":
        return Unparseable(value)
    if isinstance(value, date):
        return NativeDate(value)
    if isinstance(value, str):
        if _PLAIN_DATE_RE.match(value):
            return PlainDate(value)
        if "T" in value:
            return IsoTimestamp(value)
        return FreeformDate(value)
    return Unparseable(value)


def normalize_date(value: Any) -> str | None:
    parsed = classify_date(value)
    if isinstance(parsed, PlainDate):
        return parsed.text if _valid_plain_date(parsed.text) else None
    if isinstance(parsed, IsoTimestamp):
        return _normalize_date_part(parsed.text.split("T", 1)[0])
    if isinstance(parsed, NativeDate):
        return _date_key(parsed.value)
    if isinstance(parsed, FreeformDate):
        return _normalize_freeform(parsed.text)
    return None


def parse_date_key(value: Any) -> date | None:
    """Normalize ``value`` and return it as a ``date``, or ``None``."""
    key = normalize_date(value)
    if key is None:
        return None
    return date.fromisoformat(key)


def format_date(value: Any) -> str:
    if value is None or value == "":
        return ""
    parsed = parse_date_key(value)
    if parsed is None:
        return str(value)
    return parsed.strftime(DISPLAY_FORMAT)


def format_date_for_tooltip(value: Any) -> str:
    if value is None or value == "":
        return "Date: N/A"
    formatted = format_date(value)
    return f"Date: {formatted}" if formatted else f"Date: {value}"


def format_date_for_input(value: Any) -> str:
    return normalize_date(value) or ""


def calculate_trade_duration(entry_date: Any, exit_date: Any) -> int:
    entry = parse_date_key(entry_date)
    exit_ = parse_date_key(exit_date)
    if entry is None or exit_ is None:
        return 0
    # Both the entry and exit day count as held.
    return max(0, (exit_ - entry).days + 1)


def _valid_plain_date(text: str) -> bool:
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def _normalize_date_part(text: str) -> str | None:
    if _PLAIN_DATE_RE.match(text):
        return text if _valid_plain_date(text) else None
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        return None


def _normalize_freeform(text: str) -> str | None:
    try:
        parsed = datetime.fromisoformat(text.strip())
    except ValueError:
        return None
    return _date_key(parsed)


def _date_key(value: date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
