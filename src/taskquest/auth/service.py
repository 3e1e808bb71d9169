"""
Authentication business logic.

Handles user creation with the registration bonus and password login with
the daily login bonus.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from taskquest.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from taskquest.db.models import User
from taskquest.errors import BadRequestError, ConflictError, UnauthorizedError
from taskquest.gamification.xp_service import (
    XPAward,
    award_daily_login_bonus,
    award_registration_bonus,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    """Fetch a user by username (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.username) == username.lower()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    redis: object,
    username: str,
    email: str,
    password: str,
    *,
    now: datetime,
) -> User:
    """
    Create a level-1 user and grant the registration bonus in one transaction.

    Raises:
        BadRequestError: If the password is too weak.
        ConflictError: If the username or email is already taken.
    """
    try:
        validate_password_strength(password)
    except PasswordStrengthError as e:
        raise BadRequestError(str(e)) from e

    if await get_user_by_email(db, email) is not None:
        msg = "Email already registered"
        raise ConflictError(msg)
    if await get_user_by_username(db, username) is not None:
        msg = "Username already taken"
        raise ConflictError(msg)

    user = User(
        username=username,
        email=email.lower().strip(),
        password_hash=hash_password(password),
        level=1,
        login_count=0,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        msg = "Username or email already registered"
        raise ConflictError(msg) from e

    await award_registration_bonus(db, redis, user.id, now=now)
    await db.commit()
    logger.info("user_created", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(
    db: AsyncSession,
    redis: object,
    email: str,
    password: str,
    *,
    now: datetime,
) -> tuple[User, XPAward | None]:
    """
    Verify credentials, record the login and apply the daily login bonus.

    Returns the user and the bonus award, or None when no bonus was granted.

    Raises:
        UnauthorizedError: If credentials are invalid.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid email or password"
        raise UnauthorizedError(msg)

    user.last_login = now
    user.login_count = (user.login_count or 0) + 1
    user.updated_at = now
    await db.flush()

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.flush()
        logger.info("password_rehashed", user_id=user.id)

    award = await award_daily_login_bonus(db, redis, user.id, now=now)
    await db.commit()
    logger.info("user_logged_in", user_id=user.id, daily_bonus=award is not None)
    return user, award
