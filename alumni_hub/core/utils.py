import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Normalizes a datetime to an aware UTC value.
    Naive values are treated as UTC; SQLite hands timestamps back without tzinfo.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ordered_pair(first: uuid.UUID, second: uuid.UUID) -> Tuple[uuid.UUID, uuid.UUID]:
    """
    Returns the two ids in a stable order so {A, B} and {B, A} map to the same key.
    """
    if str(first) <= str(second):
        return first, second
    return second, first
