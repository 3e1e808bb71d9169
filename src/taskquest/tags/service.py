"""User-scoped category and label management.

Categories and labels share one shape, so every function takes the model
class. Names are unique per user, compared case-insensitively.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeVar

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import Category, Label
from taskquest.errors import ConflictError, NotFoundError
from taskquest.tags.schemas import DEFAULT_COLOR

logger = structlog.get_logger()

TagModel = TypeVar("TagModel", Category, Label)


def _kind(model: type[TagModel]) -> str:
    return model.__name__


async def list_tags(db: AsyncSession, model: type[TagModel], user_id: int) -> list[TagModel]:
    result = await db.execute(select(model).where(model.user_id == user_id).order_by(model.name))
    return list(result.scalars().all())


async def get_tag(db: AsyncSession, model: type[TagModel], user_id: int, tag_id: int) -> TagModel:
    """Fetch one tag; NotFound when absent or owned by another user."""
    result = await db.execute(select(model).where(model.id == tag_id, model.user_id == user_id))
    tag = result.scalar_one_or_none()
    if tag is None:
        msg = f"{_kind(model)} not found"
        raise NotFoundError(msg)
    return tag


async def get_owned_tags(
    db: AsyncSession,
    model: type[TagModel],
    user_id: int,
    tag_ids: Iterable[int],
) -> list[TagModel]:
    """Resolve ids to the user's own tags. Any unknown or foreign id is NotFound."""
    wanted = set(tag_ids)
    if not wanted:
        return []
    result = await db.execute(select(model).where(model.id.in_(wanted), model.user_id == user_id))
    tags = list(result.scalars().all())
    if len(tags) != len(wanted):
        msg = f"{_kind(model)} not found"
        raise NotFoundError(msg)
    return tags


async def _ensure_name_free(
    db: AsyncSession,
    model: type[TagModel],
    user_id: int,
    name: str,
    exclude_id: int | None = None,
) -> None:
    query = select(model.id).where(model.user_id == user_id, func.lower(model.name) == name.lower())
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        msg = f"A {_kind(model).lower()} with this name already exists"
        raise ConflictError(msg)


async def create_tag(
    db: AsyncSession,
    model: type[TagModel],
    user_id: int,
    name: str,
    color: str = DEFAULT_COLOR,
    *,
    now: datetime,
) -> TagModel:
    await _ensure_name_free(db, model, user_id, name)
    tag = model(user_id=user_id, name=name, color=color, created_at=now, updated_at=now)
    db.add(tag)
    await db.commit()
    logger.info("tag_created", kind=_kind(model), tag_id=tag.id, user_id=user_id)
    return tag


async def update_tag(
    db: AsyncSession,
    model: type[TagModel],
    user_id: int,
    tag_id: int,
    *,
    name: str | None = None,
    color: str | None = None,
    now: datetime,
) -> TagModel:
    tag = await get_tag(db, model, user_id, tag_id)
    if name is not None and name != tag.name:
        await _ensure_name_free(db, model, user_id, name, exclude_id=tag.id)
        tag.name = name
    if color is not None:
        tag.color = color
    tag.updated_at = now
    await db.commit()
    return tag


async def delete_tag(db: AsyncSession, model: type[TagModel], user_id: int, tag_id: int) -> None:
    """Delete the tag; association rows cascade, tasks survive."""
    tag = await get_tag(db, model, user_id, tag_id)
    await db.delete(tag)
    await db.commit()
    logger.info("tag_deleted", kind=_kind(model), tag_id=tag_id, user_id=user_id)
