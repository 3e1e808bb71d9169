"""Achievement and level endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.auth.dependencies import get_current_user
from taskquest.clock import Clock, get_clock
from taskquest.database import get_session
from taskquest.db.models import User
from taskquest.dependencies import get_redis_dep
from taskquest.gamification.achievement_service import (
    check_and_award,
    get_achievements_with_progress,
    get_user_unlocks,
    list_achievements,
)
from taskquest.gamification.level_thresholds import LEVEL_THRESHOLDS, MAX_LEVEL
from taskquest.gamification.schemas import (
    AchievementCheckResponse,
    AchievementProgressEntry,
    AchievementProgressResponse,
    AchievementResponse,
    AllLevelsResponse,
    LevelEntry,
    UnlockedAchievementResponse,
)

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


# ── Public endpoints ──


@router.get("/levels", response_model=AllLevelsResponse)
async def list_levels():
    """The level table: XP needed for each level and the cumulative threshold."""
    return AllLevelsResponse(
        levels=[
            LevelEntry(
                level=i + 1,
                xp_required=cumulative - LEVEL_THRESHOLDS[i - 1] if i else 0,
                cumulative=cumulative,
            )
            for i, cumulative in enumerate(LEVEL_THRESHOLDS)
        ],
        max_level=MAX_LEVEL,
    )


# ── Authenticated endpoints ──


@router.get("/achievements", response_model=list[AchievementResponse])
async def get_achievements(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """The full achievement catalog."""
    return [AchievementResponse.model_validate(a) for a in await list_achievements(db)]


@router.get("/achievements/me", response_model=list[UnlockedAchievementResponse])
async def get_my_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Achievements the current user has unlocked, newest first."""
    return [
        UnlockedAchievementResponse(
            achievement=AchievementResponse.model_validate(u.achievement),
            unlocked_at=u.unlocked_at,
        )
        for u in await get_user_unlocks(db, user.id)
    ]


@router.get("/achievements/progress", response_model=AchievementProgressResponse)
async def get_my_progress(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Every achievement with unlock state and milestone progress. Never unlocks."""
    items = await get_achievements_with_progress(db, user.id)
    unlocked = sum(1 for item in items if item["is_unlocked"])
    return AchievementProgressResponse(
        achievements=[
            AchievementProgressEntry(
                achievement=AchievementResponse.model_validate(item["achievement"]),
                is_unlocked=item["is_unlocked"],
                unlocked_at=item["unlocked_at"],
                progress=item["progress"],
                required=item["required"],
            )
            for item in items
        ],
        total=len(items),
        unlocked=unlocked,
        locked=len(items) - unlocked,
    )


@router.post("/achievements/check", response_model=AchievementCheckResponse)
async def check_my_achievements(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    clock: Clock = Depends(get_clock),
):
    """Run the evaluator now and return anything it unlocked."""
    unlocked = await check_and_award(db, redis, user.id, now=clock())
    await db.commit()
    return AchievementCheckResponse(
        new_achievements=[AchievementResponse.model_validate(a) for a in unlocked]
    )
