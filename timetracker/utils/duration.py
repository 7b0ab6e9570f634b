"""Derived duration metrics for time entries.

Both values are computed from the stored timestamps on every read and are
never written back to the database.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

SECONDS_PER_HOUR = Decimal(3600)


def duration(start_time: datetime, end_time: Optional[datetime]) -> Optional[timedelta]:
    """
    Elapsed time of an entry.

    Args:
        start_time: Entry start
        end_time: Entry end, None while the entry is running

    Returns:
        end_time - start_time, or None if the entry has no end

    Example:
        >>> duration(datetime(2025, 1, 1, 9), datetime(2025, 1, 1, 10, 30))
        datetime.timedelta(seconds=5400)
    """
    if end_time is None:
        return None
    return end_time - start_time


def duration_hours(start_time: datetime, end_time: Optional[datetime]) -> Optional[Decimal]:
    """
    Elapsed time in fractional hours.

    Zero or negative durations yield None rather than an error so clock skew
    at the boundary reads as "not measured".

    Example:
        >>> duration_hours(datetime(2025, 1, 1, 9), datetime(2025, 1, 1, 10, 30))
        Decimal('1.5')
    """
    elapsed = duration(start_time, end_time)
    if elapsed is None or elapsed <= timedelta(0):
        return None
    # Exact microsecond arithmetic, no float rounding.
    micros = (elapsed.days * 86400 + elapsed.seconds) * 1_000_000 + elapsed.microseconds
    return Decimal(micros) / 1_000_000 / SECONDS_PER_HOUR
