"""User router — /api/v1/users/me profile, stats, XP and account deletion."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.auth.dependencies import get_current_user
from taskquest.clock import Clock, get_clock
from taskquest.database import get_session
from taskquest.db.models import User
from taskquest.gamification.level_thresholds import compute_level
from taskquest.gamification.xp_service import get_total_xp, get_xp_history
from taskquest.users.schemas import (
    ProfileResponse,
    ProfileUpdateRequest,
    StatsResponse,
    XPHistoryEntry,
    XPHistoryResponse,
    XPResponse,
)
from taskquest.users.service import delete_account, get_profile, get_stats, update_username

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    return ProfileResponse(**await get_profile(db, user))


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> ProfileResponse:
    """Change the username. 409 if another user has it."""
    await update_username(db, user, body.username, now=clock())
    return ProfileResponse(**await get_profile(db, user))


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_account(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    """Permanently delete the account and everything it owns."""
    await delete_account(db, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Stats & XP
# ---------------------------------------------------------------------------


@router.get("/me/stats", response_model=StatsResponse)
async def get_my_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> StatsResponse:
    return StatsResponse(**await get_stats(db, user, now=clock()))


@router.get("/me/xp", response_model=XPResponse)
async def get_my_xp(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> XPResponse:
    """Current XP and progress through the level."""
    total_xp = await get_total_xp(db, user.id)
    return XPResponse(total_xp=total_xp, **compute_level(total_xp))


@router.get("/me/xp-history", response_model=XPHistoryResponse)
async def get_my_xp_history(
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> XPHistoryResponse:
    """Newest-first XP ledger entries."""
    entries = await get_xp_history(db, user.id, limit=limit)
    return XPHistoryResponse(
        entries=[
            XPHistoryEntry(
                id=e.id,
                xp_value=e.xp_value,
                description=e.description,
                task_id=e.task_id,
                created_at=e.created_at,
            )
            for e in entries
        ],
        limit=limit,
    )
