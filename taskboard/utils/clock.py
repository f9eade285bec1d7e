"""Time source used by the services.

Services take a ``clock`` callable so tests can pin "now".
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize to aware UTC. Naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> str:
    """Serialize a datetime with a fixed width so stored values sort correctly."""
    return as_utc(value).isoformat(timespec="microseconds")


def from_storage(value: str) -> datetime:
    return datetime.fromisoformat(value)
