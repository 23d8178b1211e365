"""Timestamp parsing and formatting.

Persisted documents use ISO 8601 UTC strings with millisecond precision and a
``Z`` suffix (``2026-02-12T00:00:00.000Z``); comparisons use integer epoch
milliseconds. All operations use UTC to avoid DST ambiguity issues.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 string to an aware datetime, or None if unparseable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // _ONE_MS


def parse_timestamp_ms(value: str | None) -> int | None:
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return datetime_to_ms(parsed)


def ms_to_datetime(value: int | float) -> datetime:
    return _EPOCH + timedelta(milliseconds=value)


def format_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def ms_to_iso(value: int | float | None) -> str | None:
    """Render epoch milliseconds as ISO 8601; None stays None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return format_iso(ms_to_datetime(value))
    except (OverflowError, ValueError):
        return None


def now_iso() -> str:
    return format_iso(datetime.now(timezone.utc))


__all__ = [
    "parse_timestamp",
    "parse_timestamp_ms",
    "datetime_to_ms",
    "ms_to_datetime",
    "ms_to_iso",
    "format_iso",
    "now_iso",
]
