"""Authentication router — /api/v1/auth/register and /api/v1/auth/login."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.auth.jwt import create_access_token
from taskquest.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from taskquest.auth.service import authenticate_user, register_user
from taskquest.clock import Clock, get_clock
from taskquest.config import get_settings
from taskquest.database import get_session
from taskquest.db.models import User
from taskquest.dependencies import get_redis_dep
from taskquest.gamification.xp_service import get_total_xp

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


async def _user_response(db: AsyncSession, user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        level=user.level,
        total_xp=await get_total_xp(db, user.id),
        created_at=user.created_at,
        last_login=user.last_login,
        login_count=user.login_count,
    )


async def _issue_token(db: AsyncSession, user: User, *, leveled_up: bool = False) -> TokenResponse:
    settings = get_settings()
    return TokenResponse(
        access_token=create_access_token(user.id),
        token_type="bearer",
        expires_in=settings.jwt_access_token_expire_minutes * 60,
        user=await _user_response(db, user),
        leveled_up=leveled_up,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    clock: Clock = Depends(get_clock),
) -> TokenResponse:
    """Register with username, email and password. Grants the registration bonus."""
    user = await register_user(db, redis, body.username, body.email, body.password, now=clock())
    return await _issue_token(db, user)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    clock: Clock = Depends(get_clock),
) -> TokenResponse:
    """Login with email + password. Grants the daily login bonus once per UTC day."""
    user, award = await authenticate_user(db, redis, body.email, body.password, now=clock())
    return await _issue_token(db, user, leveled_up=bool(award and award.leveled_up))
