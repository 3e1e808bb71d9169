"""Task lifecycle: CRUD, filtered listing, and the completion pipeline.

Status machine::

    open ──complete──▶ completed (terminal)
    open ◀──unarchive── archived
    open ──archive───▶ archived ──complete──▶ completed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import Select, and_, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import Achievement, Category, Label, Task
from taskquest.errors import BadRequestError, ConflictError, NotFoundError
from taskquest.gamification.achievement_service import check_and_award
from taskquest.gamification.xp_service import award_xp
from taskquest.tags.service import get_owned_tags
from taskquest.tasks.priority import (
    DEFAULT_PAGE_SIZE,
    PAGE_SIZES,
    PRIORITY_RANK,
    STATUS_ARCHIVED,
    STATUS_COMPLETED,
    STATUS_OPEN,
    xp_for_priority,
)
from taskquest.tasks.schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

SORT_FIELDS = ("due_date", "priority", "created_at", "title")

_priority_rank = case(dict(PRIORITY_RANK), value=Task.priority, else_=0)


@dataclass
class TaskFilters:
    status: str | None = None
    priority: str | None = None
    priorities: list[str] = field(default_factory=list)
    category: str | None = None
    categories: list[str] = field(default_factory=list)
    label: str | None = None
    labels: list[str] = field(default_factory=list)
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = None
    sort_order: str = "asc"


@dataclass(frozen=True)
class CompletionResult:
    task: Task
    xp_awarded: int
    new_total_xp: int
    new_level: int
    leveled_up: bool
    new_achievements: list[Achievement]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def _owned(user_id: int, task_id: int) -> Select:
    return (
        select(Task)
        .where(Task.id == task_id, Task.user_id == user_id)
        .execution_options(populate_existing=True)
    )


async def get_task(db: AsyncSession, user_id: int, task_id: int, *, for_update: bool = False) -> Task:
    """Fetch a task owned by the user; NotFound otherwise."""
    query = _owned(user_id, task_id)
    if for_update:
        query = query.with_for_update()
    task = (await db.execute(query)).scalar_one_or_none()
    if task is None:
        msg = "Task not found"
        raise NotFoundError(msg)
    return task


def _names(single: str | None, many: list[str]) -> list[str]:
    if many:
        return many
    return [single] if single else []


def _order_by(filters: TaskFilters) -> list:
    if filters.sort_by is None:
        return [Task.due_date.asc().nulls_last(), _priority_rank.desc(), Task.id.asc()]
    column = _priority_rank if filters.sort_by == "priority" else getattr(Task, filters.sort_by)
    ordered = column.desc() if filters.sort_order == "desc" else column.asc()
    if filters.sort_by == "due_date":
        ordered = ordered.nulls_last()
    return [ordered, Task.id.asc()]


async def list_tasks(db: AsyncSession, user_id: int, filters: TaskFilters) -> tuple[list[Task], int]:
    """One page of the user's tasks plus the total matching count.

    Category and label filters match tasks tagged with any of the given names;
    when both are present a task must match both.
    """
    if filters.page < 1:
        msg = "page must be at least 1"
        raise BadRequestError(msg)
    if filters.limit not in PAGE_SIZES:
        msg = f"limit must be one of {', '.join(str(s) for s in PAGE_SIZES)}"
        raise BadRequestError(msg)
    if filters.sort_by is not None and filters.sort_by not in SORT_FIELDS:
        msg = f"sort_by must be one of {', '.join(SORT_FIELDS)}"
        raise BadRequestError(msg)

    conditions = [Task.user_id == user_id]
    if filters.status:
        conditions.append(Task.status == filters.status)

    priorities = _names(filters.priority, filters.priorities)
    if priorities:
        conditions.append(Task.priority.in_(priorities))

    category_names = _names(filters.category, filters.categories)
    if category_names:
        conditions.append(
            Task.categories.any(and_(Category.user_id == user_id, Category.name.in_(category_names)))
        )

    label_names = _names(filters.label, filters.labels)
    if label_names:
        conditions.append(Task.labels.any(and_(Label.user_id == user_id, Label.name.in_(label_names))))

    total = (await db.execute(select(func.count()).select_from(Task).where(*conditions))).scalar_one()

    result = await db.execute(
        select(Task)
        .where(*conditions)
        .order_by(*_order_by(filters))
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    return list(result.scalars().all()), int(total)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


async def create_task(db: AsyncSession, user_id: int, data: TaskCreate, *, now: datetime) -> Task:
    categories = await get_owned_tags(db, Category, user_id, data.category_ids)
    labels = await get_owned_tags(db, Label, user_id, data.label_ids)

    task = Task(
        user_id=user_id,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        status=STATUS_OPEN,
        priority=data.priority,
        xp_value=xp_for_priority(data.priority),
        category=data.category,
        categories=categories,
        labels=labels,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    await db.commit()
    logger.info("User %d created task %d (%s)", user_id, task.id, task.priority)
    return await get_task(db, user_id, task.id)


async def update_task(
    db: AsyncSession,
    user_id: int,
    task_id: int,
    data: TaskUpdate,
    *,
    now: datetime,
) -> Task:
    """Apply the fields present in ``data``.

    A priority change recomputes xp_value unless the task is already
    completed, whose awarded value is kept.
    """
    task = await get_task(db, user_id, task_id)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("title", "") is None or changes.get("priority", "") is None:
        msg = "title and priority cannot be null"
        raise BadRequestError(msg)

    if "category_ids" in changes:
        task.categories = await get_owned_tags(db, Category, user_id, changes.pop("category_ids") or [])
    if "label_ids" in changes:
        task.labels = await get_owned_tags(db, Label, user_id, changes.pop("label_ids") or [])

    for name, value in changes.items():
        setattr(task, name, value)
    if "priority" in changes and task.status != STATUS_COMPLETED:
        task.xp_value = xp_for_priority(task.priority)

    task.updated_at = now
    await db.commit()
    return await get_task(db, user_id, task_id)


async def delete_task(db: AsyncSession, user_id: int, task_id: int) -> None:
    """Permanently delete; ledger entries keep their XP with task_id nulled."""
    task = await get_task(db, user_id, task_id)
    await db.delete(task)
    await db.commit()
    logger.info("User %d deleted task %d", user_id, task_id)


async def archive_task(db: AsyncSession, user_id: int, task_id: int, *, now: datetime) -> Task:
    task = await get_task(db, user_id, task_id)
    if task.status == STATUS_COMPLETED:
        msg = "Completed tasks cannot be archived"
        raise ConflictError(msg)
    if task.status != STATUS_ARCHIVED:
        task.status = STATUS_ARCHIVED
        task.updated_at = now
        await db.commit()
    return task


async def unarchive_task(db: AsyncSession, user_id: int, task_id: int, *, now: datetime) -> Task:
    task = await get_task(db, user_id, task_id)
    if task.status != STATUS_ARCHIVED:
        msg = "Task is not archived"
        raise BadRequestError(msg)
    task.status = STATUS_OPEN
    task.updated_at = now
    await db.commit()
    return task


async def complete_task(
    db: AsyncSession,
    redis: object,
    user_id: int,
    task_id: int,
    *,
    now: datetime,
) -> CompletionResult:
    """Mark the task completed, award its XP, then evaluate achievements.

    The status change and the ledger entry commit together; if the XP award
    fails neither is kept. Achievement evaluation runs afterwards and its
    failures only cost this round's unlocks.
    """
    task = await get_task(db, user_id, task_id, for_update=True)
    if task.status == STATUS_COMPLETED:
        msg = "Task is already completed"
        raise ConflictError(msg)

    task.status = STATUS_COMPLETED
    task.completed_at = now
    task.updated_at = now
    await db.flush()

    xp_awarded = task.xp_value
    award = await award_xp(
        db, redis, user_id, xp_awarded, f"Completed task: {task.title}", task.id, now=now
    )
    await db.commit()
    logger.info("User %d completed task %d for %d XP", user_id, task_id, xp_awarded)

    try:
        new_achievements = await check_and_award(db, redis, user_id, now=now)
        await db.commit()
    except Exception:
        logger.exception("Achievement check failed after completing task %d", task_id)
        await db.rollback()
        new_achievements = []
        task = await get_task(db, user_id, task_id)

    return CompletionResult(
        task=task,
        xp_awarded=xp_awarded,
        new_total_xp=award.new_total_xp,
        new_level=award.new_level,
        leveled_up=award.leveled_up,
        new_achievements=new_achievements,
    )
