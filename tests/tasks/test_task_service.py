"""Task listing argument checks at the service layer."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import User
from taskquest.errors import BadRequestError
from taskquest.tasks.service import TaskFilters, list_tasks

NOW = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    u = User(username="lister", email="lister@example.com", password_hash="x", created_at=NOW, updated_at=NOW)
    db_session.add(u)
    await db_session.commit()
    return u


class TestListTaskFilters:
    @pytest.mark.asyncio
    async def test_defaults_return_empty_page(self, db_session, user):
        tasks, total = await list_tasks(db_session, user.id, TaskFilters())
        assert tasks == []
        assert total == 0

    @pytest.mark.asyncio
    async def test_page_below_one(self, db_session, user):
        with pytest.raises(BadRequestError, match="page must be at least 1"):
            await list_tasks(db_session, user.id, TaskFilters(page=0))

    @pytest.mark.asyncio
    async def test_limit_not_allowed(self, db_session, user):
        with pytest.raises(BadRequestError, match="limit must be one of 10, 25, 50"):
            await list_tasks(db_session, user.id, TaskFilters(limit=100))

    @pytest.mark.asyncio
    async def test_unknown_sort_field(self, db_session, user):
        with pytest.raises(BadRequestError, match="sort_by must be one of"):
            await list_tasks(db_session, user.id, TaskFilters(sort_by="xp_value"))
