from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to an aware UTC value.

    Naive values are taken to already be UTC; some backends (SQLite) drop
    the offset on the way back from the database.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def month_key(value: datetime) -> str:
    """Format a datetime as its ``YYYY-MM`` bucket."""
    return f"{value.year:04d}-{value.month:02d}"
