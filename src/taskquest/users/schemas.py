"""Response and request models for /api/v1/users/me endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from taskquest.auth.schemas import USERNAME_PATTERN
from taskquest.clock import UTCDateTime


# --- Profile ---


class ProfileResponse(BaseModel):
    id: int
    username: str
    email: str
    level: int
    total_xp: int
    completed_task_count: int
    achievements_count: int
    created_at: UTCDateTime


class ProfileUpdateRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)


# --- Stats ---


class WeeklyActivity(BaseModel):
    tasks_completed_this_week: int
    xp_earned_this_week: int
    last_login_date: UTCDateTime | None = None


class StatsResponse(BaseModel):
    level: int
    total_xp: int
    xp_to_next_level: int
    completed_task_count: int
    achievements_count: int
    weekly_activity: WeeklyActivity


# --- XP ---


class XPResponse(BaseModel):
    total_xp: int
    level: int
    xp_into_level: int
    xp_for_level: int
    next_level: int
    xp_to_next_level: int
    is_max_level: bool


class XPHistoryEntry(BaseModel):
    id: int
    xp_value: int
    description: str
    task_id: int | None = None
    created_at: UTCDateTime


class XPHistoryResponse(BaseModel):
    entries: list[XPHistoryEntry]
    limit: int
