"""
Timestamp helpers.

Records carry ISO-8601 UTC strings with millisecond precision and a
trailing "Z" (e.g. "2024-05-01T12:00:00.000Z"), the format browsers
produce with Date.toISOString(). Range queries use epoch milliseconds.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Union

TimestampLike = Union[str, datetime, int, float]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_iso(dt: datetime) -> str:
    """
    Render a datetime as "YYYY-MM-DDTHH:MM:SS.mmmZ".

    Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def now_iso() -> str:
    return format_iso(utc_now())


def parse_timestamp(value: TimestampLike) -> datetime:
    """
    Convert an ISO string, datetime, or epoch milliseconds to an aware
    UTC datetime.

    Raises
    ------
    ValueError
        If a string is not valid ISO-8601.
    TypeError
        For unsupported input types.
    """
    if isinstance(value, bool):
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)
    raise TypeError(f"Unsupported timestamp value: {value!r}")


def to_iso(value: TimestampLike) -> str:
    return format_iso(parse_timestamp(value))


def to_epoch_ms(value: TimestampLike) -> int:
    dt = parse_timestamp(value)
    return int(round(dt.timestamp() * 1000))


__all__ = [
    "TimestampLike",
    "utc_now",
    "format_iso",
    "now_iso",
    "parse_timestamp",
    "to_iso",
    "to_epoch_ms",
]
