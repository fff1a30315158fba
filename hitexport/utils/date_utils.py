"""Date formatting utilities for HitExport.

Every timestamp written to an artifact goes through format_rfc3339() so the
Date column is unambiguous and always in UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

from config.defaults import DATE_FORMAT


def to_utc(value: datetime) -> datetime:
    """Convert a datetime to UTC. Naive datetimes are assumed to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_rfc3339(value: datetime) -> str:
    """Render a datetime as RFC 3339 in UTC with second precision.

    Args:
        value: Aware or naive datetime.

    Returns:
        String such as ``2020-06-18T14:42:00Z``.
    """
    return to_utc(value).strftime(DATE_FORMAT)
