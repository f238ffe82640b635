"""Clock helpers — UTC normalization for timestamps read back from the store.

SQLite drops tzinfo on DateTime(timezone=True) columns; PostgreSQL keeps it.
Everything in the domain compares aware UTC datetimes.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def hours_between(start: datetime, end: datetime) -> float:
    return round((ensure_utc(end) - ensure_utc(start)).total_seconds() / 3600, 2)
