"""Category and label endpoints — /api/v1/categories and /api/v1/labels."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.auth.dependencies import get_current_user
from taskquest.clock import Clock, get_clock
from taskquest.database import get_session
from taskquest.db.models import Category, Label, User
from taskquest.tags import service
from taskquest.tags.schemas import TagCreate, TagResponse, TagUpdate


def build_tag_router(model: type[Category] | type[Label], prefix: str, tag: str) -> APIRouter:
    """Five CRUD routes for one tag model, all scoped to the current user."""
    router = APIRouter(prefix=f"/api/v1/{prefix}", tags=[tag])

    @router.get("", response_model=list[TagResponse])
    async def list_tags(
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ):
        return await service.list_tags(db, model, user.id)

    @router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
    async def create_tag(
        body: TagCreate,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
        clock: Clock = Depends(get_clock),
    ):
        return await service.create_tag(db, model, user.id, body.name, body.color, now=clock())

    @router.get("/{tag_id}", response_model=TagResponse)
    async def get_tag(
        tag_id: int,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ):
        return await service.get_tag(db, model, user.id, tag_id)

    @router.put("/{tag_id}", response_model=TagResponse)
    async def update_tag(
        tag_id: int,
        body: TagUpdate,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
        clock: Clock = Depends(get_clock),
    ):
        return await service.update_tag(
            db, model, user.id, tag_id, name=body.name, color=body.color, now=clock()
        )

    @router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_tag(
        tag_id: int,
        user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_session),
    ) -> Response:
        await service.delete_tag(db, model, user.id, tag_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


categories_router = build_tag_router(Category, "categories", "Categories")
labels_router = build_tag_router(Label, "labels", "Labels")
