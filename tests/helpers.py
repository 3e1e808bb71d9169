"""Helpers shared by API tests."""

from __future__ import annotations

from datetime import datetime, timedelta

from httpx import AsyncClient

PASSWORD = "SecureP@ss1"


class FrozenClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register_user(
    client: AsyncClient,
    username: str = "quester",
    email: str | None = None,
    password: str = PASSWORD,
) -> dict:
    """Register through the API and return the JSON body (token + user)."""
    response = await client.post("/api/v1/auth/register", json={
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
    })
    assert response.status_code == 201, response.text
    return response.json()


async def login(client: AsyncClient, email: str, password: str = PASSWORD) -> dict:
    response = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


async def create_task(client: AsyncClient, **fields) -> dict:
    """Create a task through the API with sensible defaults."""
    body = {"title": "Write tests", "priority": "Medium", **fields}
    response = await client.post("/api/v1/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def complete(client: AsyncClient, task_id: int) -> dict:
    response = await client.patch(f"/api/v1/tasks/{task_id}/complete")
    assert response.status_code == 200, response.text
    return response.json()
