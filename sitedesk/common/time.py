"""Common time utilities."""

from __future__ import annotations

import datetime as dt

_ONE_MILLISECOND = dt.timedelta(milliseconds=1)


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp."""
    return dt.datetime.now(dt.UTC)


def format_timestamp(value: dt.datetime) -> str:
    """Render ``value`` as ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    text = value.astimezone(dt.UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_timestamp(value: str) -> dt.datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


def advance_timestamp(now: dt.datetime, previous: str | None) -> str:
    """Return a timestamp for ``now`` that sorts strictly after ``previous``.

    Two mutations of the same page within one millisecond would otherwise
    share an ``updatedAt`` value.
    """
    if previous is None:
        return format_timestamp(now)
    floor = parse_timestamp(previous) + _ONE_MILLISECOND
    return format_timestamp(max(now, floor))
