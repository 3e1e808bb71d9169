"""Achievement evaluation: threshold checks, idempotent unlocks, progress reporting."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import Achievement, AchievementUnlock, Task, User
from taskquest.gamification.events import ACHIEVEMENT_CHANNEL, publish_event
from taskquest.gamification.week_utils import get_week_bounds

logger = logging.getLogger(__name__)

TASK_MILESTONE = "task_milestone"
LEVEL_MILESTONE = "level_milestone"
SPECIAL = "special"


@dataclass(frozen=True)
class UserCounters:
    """Counters every achievement type is evaluated against."""

    completed_tasks: int
    level: int


async def count_completed_tasks(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(Task).where(Task.user_id == user_id, Task.status == "completed")
    )
    return int(result.scalar_one())


async def get_counters(db: AsyncSession, user_id: int) -> UserCounters:
    level_result = await db.execute(select(User.level).where(User.id == user_id))
    level = level_result.scalar_one_or_none() or 1
    return UserCounters(completed_tasks=await count_completed_tasks(db, user_id), level=level)


async def list_achievements(db: AsyncSession) -> list[Achievement]:
    """Full catalog in display order."""
    result = await db.execute(select(Achievement).order_by(Achievement.sort_order, Achievement.id))
    return list(result.scalars().all())


async def get_user_unlocks(db: AsyncSession, user_id: int) -> list[AchievementUnlock]:
    """Unlocks for the user, newest first."""
    result = await db.execute(
        select(AchievementUnlock)
        .where(AchievementUnlock.user_id == user_id)
        .order_by(AchievementUnlock.unlocked_at.desc(), AchievementUnlock.id.desc())
    )
    return list(result.scalars().all())


async def count_user_unlocks(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count()).select_from(AchievementUnlock).where(AchievementUnlock.user_id == user_id)
    )
    return int(result.scalar_one())


# ---------------------------------------------------------------------------
# Special achievements
# ---------------------------------------------------------------------------


async def _efficiency_master(db: AsyncSession, user_id: int, now: datetime) -> bool:
    """At least one Urgent task due this week, and every one of them completed."""
    week_start, week_end = get_week_bounds(now)
    result = await db.execute(
        select(Task.status).where(
            Task.user_id == user_id,
            Task.priority == "Urgent",
            Task.due_date >= week_start,
            Task.due_date < week_end,
        )
    )
    statuses = list(result.scalars().all())
    return bool(statuses) and all(s == "completed" for s in statuses)


SpecialEvaluator = Callable[[AsyncSession, int, datetime], Awaitable[bool]]

SPECIAL_EVALUATORS: dict[str, SpecialEvaluator] = {
    "efficiency_master": _efficiency_master,
}


async def _qualifies(
    db: AsyncSession,
    user_id: int,
    achievement: Achievement,
    counters: UserCounters,
    now: datetime,
) -> bool:
    required = achievement.requirement_value or 0
    if achievement.achievement_type == TASK_MILESTONE:
        return counters.completed_tasks >= required
    if achievement.achievement_type == LEVEL_MILESTONE:
        return counters.level >= required
    if achievement.achievement_type == SPECIAL:
        evaluator = SPECIAL_EVALUATORS.get(achievement.slug)
        if evaluator is None:
            logger.warning("No evaluator for special achievement: %s", achievement.slug)
            return False
        return await evaluator(db, user_id, now)
    logger.warning("Unknown achievement type: %s", achievement.achievement_type)
    return False


# ---------------------------------------------------------------------------
# Unlocking
# ---------------------------------------------------------------------------


async def _unlock(db: AsyncSession, user_id: int, achievement: Achievement, now: datetime) -> bool:
    """Insert the unlock row in a savepoint. Returns False when it was not inserted."""
    try:
        async with db.begin_nested():
            db.add(AchievementUnlock(user_id=user_id, achievement_id=achievement.id, unlocked_at=now))
    except IntegrityError:
        return False  # Already unlocked by a concurrent request
    except SQLAlchemyError:
        logger.warning(
            "Failed to unlock achievement %s for user %d", achievement.slug, user_id, exc_info=True
        )
        return False
    return True


async def check_and_award(
    db: AsyncSession,
    redis: object,
    user_id: int,
    *,
    now: datetime | None = None,
) -> list[Achievement]:
    """Unlock every achievement the user now qualifies for.

    Returns only achievements unlocked during this call; previously unlocked
    ones are skipped. Safe to call repeatedly.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    counters = await get_counters(db, user_id)
    unlocked_ids = {u.achievement_id for u in await get_user_unlocks(db, user_id)}

    newly_unlocked: list[Achievement] = []
    for achievement in await list_achievements(db):
        if achievement.id in unlocked_ids:
            continue
        if not await _qualifies(db, user_id, achievement, counters, now):
            continue
        if await _unlock(db, user_id, achievement, now):
            newly_unlocked.append(achievement)

    for achievement in newly_unlocked:
        logger.info("User %d unlocked achievement %s", user_id, achievement.slug)
        await publish_event(
            redis,
            ACHIEVEMENT_CHANNEL,
            {"user_id": user_id, "slug": achievement.slug, "name": achievement.name},
        )

    return newly_unlocked


# ---------------------------------------------------------------------------
# Progress (read-only)
# ---------------------------------------------------------------------------


async def get_achievements_with_progress(db: AsyncSession, user_id: int) -> list[dict]:
    """Every achievement with unlock state and, for locked milestones, progress.

    Uses the same counters as check_and_award but never unlocks anything.
    """
    counters = await get_counters(db, user_id)
    unlocks = {u.achievement_id: u for u in await get_user_unlocks(db, user_id)}

    items = []
    for achievement in await list_achievements(db):
        unlock = unlocks.get(achievement.id)
        progress: int | None = None
        required: int | None = None
        if unlock is None:
            if achievement.achievement_type == TASK_MILESTONE:
                progress = counters.completed_tasks
                required = achievement.requirement_value or 0
            elif achievement.achievement_type == LEVEL_MILESTONE:
                progress = counters.level
                required = achievement.requirement_value or 0

        items.append({
            "achievement": achievement,
            "is_unlocked": unlock is not None,
            "unlocked_at": unlock.unlocked_at if unlock else None,
            "progress": progress,
            "required": required,
        })
    return items
