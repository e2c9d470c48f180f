"""Time utilities."""
from datetime import UTC, date, datetime


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def today_utc() -> date:
    """Return the current calendar date in UTC."""

    return utcnow().date()


__all__ = ["utcnow", "today_utc"]
