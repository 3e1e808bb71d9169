"""User profile, statistics and account lifecycle."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func, select

from taskquest.auth.service import get_user_by_username
from taskquest.db.models import Task, User
from taskquest.errors import ConflictError
from taskquest.gamification.achievement_service import count_completed_tasks, count_user_unlocks
from taskquest.gamification.level_thresholds import compute_level
from taskquest.gamification.week_utils import get_week_bounds
from taskquest.gamification.xp_service import get_last_login_bonus_at, get_total_xp, get_xp_earned_since

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def get_profile(db: AsyncSession, user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "level": user.level,
        "total_xp": await get_total_xp(db, user.id),
        "completed_task_count": await count_completed_tasks(db, user.id),
        "achievements_count": await count_user_unlocks(db, user.id),
        "created_at": user.created_at,
    }


async def update_username(db: AsyncSession, user: User, username: str, *, now: datetime) -> User:
    """
    Change the username.

    Raises:
        ConflictError: If another user already has it.
    """
    existing = await get_user_by_username(db, username)
    if existing is not None and existing.id != user.id:
        msg = "Username already taken"
        raise ConflictError(msg)

    user.username = username
    user.updated_at = now
    await db.commit()
    logger.info("username_updated", user_id=user.id)
    return user


async def get_stats(db: AsyncSession, user: User, *, now: datetime) -> dict[str, Any]:
    """Level, XP and counters, plus activity over the current ISO week."""
    total_xp = await get_total_xp(db, user.id)
    week_start, week_end = get_week_bounds(now)

    completed_this_week = await db.execute(
        select(func.count())
        .select_from(Task)
        .where(
            Task.user_id == user.id,
            Task.status == "completed",
            Task.completed_at >= week_start,
            Task.completed_at < week_end,
        )
    )

    return {
        "level": user.level,
        "total_xp": total_xp,
        "xp_to_next_level": compute_level(total_xp)["xp_to_next_level"],
        "completed_task_count": await count_completed_tasks(db, user.id),
        "achievements_count": await count_user_unlocks(db, user.id),
        "weekly_activity": {
            "tasks_completed_this_week": int(completed_this_week.scalar_one()),
            "xp_earned_this_week": await get_xp_earned_since(db, user.id, week_start),
            "last_login_date": user.last_login or await get_last_login_bonus_at(db, user.id),
        },
    }


async def delete_account(db: AsyncSession, user: User) -> None:
    """Delete the user; tasks, ledger, unlocks and tags cascade."""
    user_id = user.id
    await db.delete(user)
    await db.commit()
    logger.info("account_deleted", user_id=user_id)
