"""Pydantic response models for achievement and level endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from taskquest.clock import UTCDateTime


# --- Achievements ---


class AchievementResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    slug: str
    name: str
    description: str
    achievement_type: str
    requirement_value: int | None = None


class UnlockedAchievementResponse(BaseModel):
    achievement: AchievementResponse
    unlocked_at: UTCDateTime


class AchievementProgressEntry(BaseModel):
    achievement: AchievementResponse
    is_unlocked: bool
    unlocked_at: UTCDateTime | None = None
    progress: int | None = None
    required: int | None = None


class AchievementProgressResponse(BaseModel):
    achievements: list[AchievementProgressEntry]
    total: int
    unlocked: int
    locked: int


class AchievementCheckResponse(BaseModel):
    new_achievements: list[AchievementResponse]


# --- Levels ---


class LevelEntry(BaseModel):
    level: int
    xp_required: int
    cumulative: int


class AllLevelsResponse(BaseModel):
    levels: list[LevelEntry]
    max_level: int
