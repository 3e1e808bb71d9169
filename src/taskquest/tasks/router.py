"""Task endpoints — /api/v1/tasks."""

from __future__ import annotations

import math
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.auth.dependencies import get_current_user
from taskquest.clock import Clock, get_clock
from taskquest.database import get_session
from taskquest.db.models import User
from taskquest.dependencies import get_redis_dep
from taskquest.tasks import service
from taskquest.tasks.priority import DEFAULT_PAGE_SIZE, Priority, Status
from taskquest.tasks.schemas import (
    CompletionResponse,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    UnlockedAchievement,
)

router = APIRouter(prefix="/api/v1/tasks", tags=["Tasks"])


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status_filter: Status | None = Query(None, alias="status"),
    priority: Priority | None = None,
    priorities: list[Priority] | None = Query(None),
    category: str | None = None,
    categories: list[str] | None = Query(None),
    label: str | None = None,
    labels: list[str] | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    sort_by: Literal["due_date", "priority", "created_at", "title"] | None = None,
    sort_order: Literal["asc", "desc"] = "asc",
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List the current user's tasks with filters and pagination."""
    filters = service.TaskFilters(
        status=status_filter,
        priority=priority,
        priorities=list(priorities or []),
        category=category,
        categories=list(categories or []),
        label=label,
        labels=list(labels or []),
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    tasks, total = await service.list_tasks(db, user.id, filters)
    return TaskListResponse(
        tasks=[TaskResponse.model_validate(t) for t in tasks],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    """Create an open task worth the XP of its priority."""
    task = await service.create_task(db, user.id, body, now=clock())
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return TaskResponse.model_validate(await service.get_task(db, user.id, task_id))


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    task = await service.update_task(db, user.id, task_id, body, now=clock())
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> Response:
    await service.delete_task(db, user.id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Lifecycle ──


@router.patch("/{task_id}/complete", response_model=CompletionResponse)
async def complete_task(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    clock: Clock = Depends(get_clock),
):
    """Complete a task: award its XP, report level-ups and newly unlocked achievements."""
    result = await service.complete_task(db, redis, user.id, task_id, now=clock())
    return CompletionResponse(
        task=TaskResponse.model_validate(result.task),
        xp_awarded=result.xp_awarded,
        new_total_xp=result.new_total_xp,
        new_level=result.new_level,
        leveled_up=result.leveled_up,
        new_achievements=[
            UnlockedAchievement(slug=a.slug, name=a.name, description=a.description)
            for a in result.new_achievements
        ],
    )


@router.patch("/{task_id}/archive", response_model=TaskResponse)
async def archive_task(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    task = await service.archive_task(db, user.id, task_id, now=clock())
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}/unarchive", response_model=TaskResponse)
async def unarchive_task(
    task_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
):
    task = await service.unarchive_task(db, user.id, task_id, now=clock())
    return TaskResponse.model_validate(task)
