"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def ensure_utc(value: dt.datetime, *, field: str) -> dt.datetime:
    """Return ``value`` converted to UTC, rejecting naive datetimes."""
    if value.tzinfo is None:
        msg = f"{field} must be timezone-aware"
        raise ValueError(msg)
    return value.astimezone(dt.UTC)


def floor_to_day(value: dt.datetime) -> dt.datetime:
    """Truncate an aware datetime to midnight UTC of the same day.

    Window boundaries are floored so repeated runs within one day agree on
    which records are current.
    """
    utc_value = ensure_utc(value, field="value")
    return utc_value.replace(hour=0, minute=0, second=0, microsecond=0)


def window_start(now: dt.datetime, days: int) -> dt.datetime:
    """Return the floored start of a rolling ``days``-long window ending ``now``."""
    return floor_to_day(now - dt.timedelta(days=days))
