"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def whole_days_between(start: datetime, end: datetime) -> int:
    """floor((end - start) / 1 day). Negative when end precedes start."""
    return (as_utc(end) - as_utc(start)) // ONE_DAY
