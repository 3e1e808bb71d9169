"""Task CRUD, filtering, sorting and pagination through the HTTP API."""

from __future__ import annotations

import pytest
from helpers import bearer, create_task, register_user


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_create_defaults(self, authed_client):
        task = await create_task(authed_client, title="Buy milk", priority="Low")
        assert task["title"] == "Buy milk"
        assert task["status"] == "open"
        assert task["xp_value"] == 10
        assert task["completed_at"] is None
        assert task["categories"] == []
        assert task["labels"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("priority", "xp"), [("Low", 10), ("Medium", 25), ("High", 50), ("Urgent", 75)])
    async def test_xp_follows_priority(self, authed_client, priority, xp):
        task = await create_task(authed_client, priority=priority)
        assert task["xp_value"] == xp

    @pytest.mark.asyncio
    async def test_due_date_round_trips_as_utc(self, authed_client):
        task = await create_task(authed_client, due_date="2026-03-06T09:30:00Z")
        assert task["due_date"].startswith("2026-03-06T09:30:00")

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, authed_client):
        response = await authed_client.post("/api/v1/tasks", json={"priority": "Low"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_title_too_long_rejected(self, authed_client):
        response = await authed_client.post("/api/v1/tasks", json={"title": "x" * 201, "priority": "Low"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_priority_rejected(self, authed_client):
        response = await authed_client.post("/api/v1/tasks", json={"title": "t", "priority": "Critical"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_description_limit(self, authed_client):
        response = await authed_client.post(
            "/api/v1/tasks", json={"title": "t", "priority": "Low", "description": "d" * 1001}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.post("/api/v1/tasks", json={"title": "t", "priority": "Low"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_with_owned_tags(self, authed_client):
        category = (await authed_client.post("/api/v1/categories", json={"name": "Work"})).json()
        label = (await authed_client.post("/api/v1/labels", json={"name": "quick", "color": "#22C55E"})).json()

        task = await create_task(authed_client, category_ids=[category["id"]], label_ids=[label["id"]])
        assert [c["name"] for c in task["categories"]] == ["Work"]
        assert task["labels"] == [{"id": label["id"], "name": "quick", "color": "#22C55E"}]

    @pytest.mark.asyncio
    async def test_unknown_category_id_not_found(self, authed_client):
        response = await authed_client.post(
            "/api/v1/tasks", json={"title": "t", "priority": "Low", "category_ids": [4242]}
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Category not found"

    @pytest.mark.asyncio
    async def test_other_users_label_not_found(self, authed_client):
        other = await register_user(authed_client, username="other")
        foreign = await authed_client.post(
            "/api/v1/labels", json={"name": "theirs"}, headers=bearer(other["access_token"])
        )
        response = await authed_client.post(
            "/api/v1/tasks", json={"title": "t", "priority": "Low", "label_ids": [foreign.json()["id"]]}
        )
        assert response.status_code == 404


class TestReadUpdateDelete:
    @pytest.mark.asyncio
    async def test_get_own_task(self, authed_client):
        task = await create_task(authed_client)
        response = await authed_client.get(f"/api/v1/tasks/{task['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == task["id"]

    @pytest.mark.asyncio
    async def test_other_users_task_is_not_found(self, authed_client):
        task = await create_task(authed_client)
        other = await register_user(authed_client, username="snoop")
        response = await authed_client.get(f"/api/v1/tasks/{task['id']}", headers=bearer(other["access_token"]))
        assert response.status_code == 404
        assert response.json()["detail"] == "Task not found"

    @pytest.mark.asyncio
    async def test_update_title_only(self, authed_client):
        task = await create_task(authed_client, description="keep me")
        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"title": "Renamed"})
        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "Renamed"
        assert body["description"] == "keep me"

    @pytest.mark.asyncio
    async def test_priority_change_recomputes_xp(self, authed_client):
        task = await create_task(authed_client, priority="Low")
        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"priority": "Urgent"})
        assert response.json()["xp_value"] == 75

    @pytest.mark.asyncio
    async def test_completed_task_keeps_awarded_xp(self, authed_client):
        task = await create_task(authed_client, priority="High")
        await authed_client.patch(f"/api/v1/tasks/{task['id']}/complete")
        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"priority": "Low"})
        body = response.json()
        assert body["priority"] == "Low"
        assert body["xp_value"] == 50

    @pytest.mark.asyncio
    async def test_null_title_rejected(self, authed_client):
        task = await create_task(authed_client)
        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"title": None})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_clear_due_date(self, authed_client):
        task = await create_task(authed_client, due_date="2026-03-06T09:30:00Z")
        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"due_date": None})
        assert response.json()["due_date"] is None

    @pytest.mark.asyncio
    async def test_replace_tags(self, authed_client):
        a = (await authed_client.post("/api/v1/categories", json={"name": "A"})).json()
        b = (await authed_client.post("/api/v1/categories", json={"name": "B"})).json()
        task = await create_task(authed_client, category_ids=[a["id"]])

        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"category_ids": [b["id"]]})
        assert [c["name"] for c in response.json()["categories"]] == ["B"]

        response = await authed_client.put(f"/api/v1/tasks/{task['id']}", json={"category_ids": []})
        assert response.json()["categories"] == []

    @pytest.mark.asyncio
    async def test_update_missing_task(self, authed_client):
        response = await authed_client.put("/api/v1/tasks/999", json={"title": "x"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, authed_client):
        task = await create_task(authed_client)
        response = await authed_client.delete(f"/api/v1/tasks/{task['id']}")
        assert response.status_code == 204
        assert (await authed_client.get(f"/api/v1/tasks/{task['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_other_users_task(self, authed_client):
        task = await create_task(authed_client)
        other = await register_user(authed_client, username="vandal")
        response = await authed_client.delete(f"/api/v1/tasks/{task['id']}", headers=bearer(other["access_token"]))
        assert response.status_code == 404
        assert (await authed_client.get(f"/api/v1/tasks/{task['id']}")).status_code == 200


class TestListTasks:
    @pytest.mark.asyncio
    async def test_empty(self, authed_client):
        body = (await authed_client.get("/api/v1/tasks")).json()
        assert body == {"tasks": [], "total": 0, "page": 1, "limit": 25, "total_pages": 0}

    @pytest.mark.asyncio
    async def test_only_own_tasks(self, authed_client):
        await create_task(authed_client)
        other = await register_user(authed_client, username="neighbour")
        body = (await authed_client.get("/api/v1/tasks", headers=bearer(other["access_token"]))).json()
        assert body["total"] == 0

    @pytest.mark.asyncio
    async def test_filter_by_status(self, authed_client):
        done = await create_task(authed_client, title="done")
        await create_task(authed_client, title="todo")
        await authed_client.patch(f"/api/v1/tasks/{done['id']}/complete")

        body = (await authed_client.get("/api/v1/tasks", params={"status": "completed"})).json()
        assert [t["title"] for t in body["tasks"]] == ["done"]

    @pytest.mark.asyncio
    async def test_filter_by_priorities(self, authed_client):
        for priority in ("Low", "Medium", "High", "Urgent"):
            await create_task(authed_client, title=priority, priority=priority)

        body = (await authed_client.get("/api/v1/tasks", params={"priority": "High"})).json()
        assert [t["title"] for t in body["tasks"]] == ["High"]

        body = (await authed_client.get("/api/v1/tasks", params=[("priorities", "Low"), ("priorities", "Urgent")])).json()
        assert {t["title"] for t in body["tasks"]} == {"Low", "Urgent"}

    @pytest.mark.asyncio
    async def test_filter_by_category_and_label(self, authed_client):
        work = (await authed_client.post("/api/v1/categories", json={"name": "Work"})).json()
        home = (await authed_client.post("/api/v1/categories", json={"name": "Home"})).json()
        quick = (await authed_client.post("/api/v1/labels", json={"name": "quick"})).json()

        await create_task(authed_client, title="w", category_ids=[work["id"]])
        await create_task(authed_client, title="wq", category_ids=[work["id"]], label_ids=[quick["id"]])
        await create_task(authed_client, title="h", category_ids=[home["id"]])

        body = (await authed_client.get("/api/v1/tasks", params={"category": "Work"})).json()
        assert {t["title"] for t in body["tasks"]} == {"w", "wq"}

        body = (await authed_client.get("/api/v1/tasks", params=[("categories", "Work"), ("categories", "Home")])).json()
        assert body["total"] == 3

        body = (await authed_client.get("/api/v1/tasks", params={"category": "Work", "label": "quick"})).json()
        assert [t["title"] for t in body["tasks"]] == ["wq"]

    @pytest.mark.asyncio
    async def test_default_order_due_date_then_priority(self, authed_client):
        await create_task(authed_client, title="undated", priority="Urgent")
        await create_task(authed_client, title="later", priority="Low", due_date="2026-03-10T00:00:00Z")
        await create_task(authed_client, title="soon-low", priority="Low", due_date="2026-03-05T00:00:00Z")
        await create_task(authed_client, title="soon-high", priority="High", due_date="2026-03-05T00:00:00Z")

        body = (await authed_client.get("/api/v1/tasks")).json()
        assert [t["title"] for t in body["tasks"]] == ["soon-high", "soon-low", "later", "undated"]

    @pytest.mark.asyncio
    async def test_sort_by_title_desc(self, authed_client):
        for title in ("b", "a", "c"):
            await create_task(authed_client, title=title)
        body = (await authed_client.get("/api/v1/tasks", params={"sort_by": "title", "sort_order": "desc"})).json()
        assert [t["title"] for t in body["tasks"]] == ["c", "b", "a"]

    @pytest.mark.asyncio
    async def test_sort_by_priority(self, authed_client):
        for priority in ("Medium", "Urgent", "Low"):
            await create_task(authed_client, title=priority, priority=priority)
        body = (await authed_client.get("/api/v1/tasks", params={"sort_by": "priority", "sort_order": "desc"})).json()
        assert [t["title"] for t in body["tasks"]] == ["Urgent", "Medium", "Low"]

    @pytest.mark.asyncio
    async def test_pagination(self, authed_client):
        for i in range(12):
            await create_task(authed_client, title=f"task {i:02d}")

        first = (await authed_client.get("/api/v1/tasks", params={"limit": 10, "sort_by": "title"})).json()
        assert first["total"] == 12
        assert first["total_pages"] == 2
        assert len(first["tasks"]) == 10

        second = (await authed_client.get("/api/v1/tasks", params={"limit": 10, "page": 2, "sort_by": "title"})).json()
        assert [t["title"] for t in second["tasks"]] == ["task 10", "task 11"]

    @pytest.mark.asyncio
    async def test_limit_must_be_allowed_size(self, authed_client):
        response = await authed_client.get("/api/v1/tasks", params={"limit": 7})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_page_below_one_rejected(self, authed_client):
        response = await authed_client.get("/api/v1/tasks", params={"page": 0})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_sort_field_rejected(self, authed_client):
        response = await authed_client.get("/api/v1/tasks", params={"sort_by": "xp_value"})
        assert response.status_code == 422
