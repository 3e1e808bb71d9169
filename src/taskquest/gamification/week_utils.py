"""ISO week boundary helpers (Monday 00:00 UTC to the next Monday 00:00 UTC)."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def get_week_iso(dt: datetime) -> str:
    """Get ISO week string e.g. '2026-W09'. Uses %G-W%V (ISO year + ISO week)."""
    return dt.strftime("%G-W%V")


def get_monday(dt: datetime | date) -> date:
    """Get the Monday of the ISO week containing dt."""
    d = dt.astimezone(timezone.utc).date() if isinstance(dt, datetime) else dt
    return d - timedelta(days=d.weekday())


def get_week_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Half-open [Monday 00:00 UTC, next Monday 00:00 UTC) for the week containing now."""
    start = datetime.combine(get_monday(now), time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=7)
