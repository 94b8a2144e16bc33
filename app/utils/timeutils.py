from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime for comparison.

    SQLite hands back naive values for ``DateTime(timezone=True)`` columns while
    request payloads carry an offset, so both sides are reduced to naive UTC.
    """
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware UTC datetime; naive input is taken to already be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
