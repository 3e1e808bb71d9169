"""XP ledger service with per-user serialization and level-up detection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import User, XPLedger
from taskquest.errors import NotFoundError
from taskquest.gamification.events import LEVEL_UP_CHANNEL, publish_event
from taskquest.gamification.level_thresholds import level_for

logger = logging.getLogger(__name__)

REGISTRATION_XP = 5
REGISTRATION_DESCRIPTION = "Registration bonus"
DAILY_LOGIN_XP = 2
DAILY_LOGIN_DESCRIPTION = "Daily login"


@dataclass(frozen=True)
class XPAward:
    new_total_xp: int
    new_level: int
    leveled_up: bool


async def get_total_xp(db: AsyncSession, user_id: int) -> int:
    """Sum of every ledger entry for the user (0 when there are none)."""
    result = await db.execute(
        select(func.coalesce(func.sum(XPLedger.xp_value), 0)).where(XPLedger.user_id == user_id)
    )
    return int(result.scalar_one())


async def _lock_user(db: AsyncSession, user_id: int) -> User:
    """Load the user row FOR UPDATE so concurrent awards for one user serialize."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def award_xp(
    db: AsyncSession,
    redis: object,
    user_id: int,
    xp_value: int,
    description: str,
    task_id: int | None = None,
    *,
    now: datetime | None = None,
) -> XPAward:
    """Append one ledger entry and recompute the user's level.

    Runs inside the caller's transaction:
    1. Lock the user row
    2. Sum the ledger and add the new entry
    3. Recompute level from the new total and cache it on the user
    4. If the level rose, publish a level_up event
    """
    if now is None:
        now = datetime.now(timezone.utc)

    user = await _lock_user(db, user_id)
    old_level = user.level

    previous_total = await get_total_xp(db, user_id)
    db.add(
        XPLedger(
            user_id=user_id,
            xp_value=xp_value,
            description=description,
            task_id=task_id,
            created_at=now,
        )
    )

    new_total = previous_total + xp_value
    new_level = level_for(new_total)
    user.level = new_level
    user.updated_at = now
    await db.flush()

    leveled_up = new_level > old_level
    if leveled_up:
        logger.info("User %d leveled up: %d -> %d", user_id, old_level, new_level)
        await publish_event(
            redis,
            LEVEL_UP_CHANNEL,
            {"user_id": user_id, "old_level": old_level, "new_level": new_level},
        )

    return XPAward(new_total_xp=new_total, new_level=new_level, leveled_up=leveled_up)


def _day_bounds(now: datetime) -> tuple[datetime, datetime]:
    """[00:00, next 00:00) UTC of the calendar day containing now."""
    day = now.astimezone(timezone.utc).date()
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


async def has_daily_login_bonus(db: AsyncSession, user_id: int, now: datetime) -> bool:
    """Whether the daily login bonus was already granted on now's calendar day."""
    start, end = _day_bounds(now)
    result = await db.execute(
        select(XPLedger.id)
        .where(
            XPLedger.user_id == user_id,
            XPLedger.description == DAILY_LOGIN_DESCRIPTION,
            XPLedger.created_at >= start,
            XPLedger.created_at < end,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def award_daily_login_bonus(
    db: AsyncSession,
    redis: object,
    user_id: int,
    *,
    now: datetime,
) -> XPAward | None:
    """Grant the daily login bonus at most once per calendar day.

    Returns None when it was already granted today or when the lookup/award
    fails; failures roll back to a savepoint so the login itself proceeds.
    """
    try:
        async with db.begin_nested():
            # Hold the user row lock across the check and the insert.
            await _lock_user(db, user_id)
            if await has_daily_login_bonus(db, user_id, now):
                return None
            return await award_xp(db, redis, user_id, DAILY_LOGIN_XP, DAILY_LOGIN_DESCRIPTION, now=now)
    except SQLAlchemyError:
        logger.warning("Daily login bonus skipped for user %d", user_id, exc_info=True)
        return None


async def award_registration_bonus(
    db: AsyncSession,
    redis: object,
    user_id: int,
    *,
    now: datetime,
) -> XPAward:
    """Grant the one-time registration bonus."""
    return await award_xp(db, redis, user_id, REGISTRATION_XP, REGISTRATION_DESCRIPTION, now=now)


async def get_xp_history(db: AsyncSession, user_id: int, limit: int = 20) -> list[XPLedger]:
    """Newest-first ledger entries."""
    result = await db.execute(
        select(XPLedger)
        .where(XPLedger.user_id == user_id)
        .order_by(XPLedger.created_at.desc(), XPLedger.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_xp_earned_since(db: AsyncSession, user_id: int, since: datetime) -> int:
    """Net XP from ledger entries created at or after ``since``."""
    result = await db.execute(
        select(func.coalesce(func.sum(XPLedger.xp_value), 0)).where(
            XPLedger.user_id == user_id,
            XPLedger.created_at >= since,
        )
    )
    return int(result.scalar_one())


async def get_last_login_bonus_at(db: AsyncSession, user_id: int) -> datetime | None:
    """Timestamp of the most recent daily login ledger entry."""
    result = await db.execute(
        select(XPLedger.created_at)
        .where(XPLedger.user_id == user_id, XPLedger.description == DAILY_LOGIN_DESCRIPTION)
        .order_by(XPLedger.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()
