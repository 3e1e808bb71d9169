"""Injectable time source.

Services take ``now`` explicitly; routers obtain it through ``get_clock`` so
tests can override the dependency and pin the calendar date.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def get_clock() -> Clock:
    """FastAPI dependency returning the active clock."""
    return utcnow


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# Timestamps read back from SQLite are naive; responses always carry UTC.
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]
