"""Timestamp helpers - everything is stored and compared in UTC."""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.

    Example:
        >>> as_utc(datetime(2025, 1, 1, 9, 0)).isoformat()
        '2025-01-01T09:00:00+00:00'
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
