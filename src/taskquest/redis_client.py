"""Optional Redis client shared by the rate limiter and gamification event publishing.

TaskQuest runs without Redis: when ``TQ_REDIS_URL`` is empty the client is
never created, ``get_optional_redis()`` returns None and callers skip their
Redis work.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

_client: redis.Redis | None = None


async def init_redis(url: str, *, max_connections: int = 20) -> redis.Redis:
    global _client  # noqa: PLW0603
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None


def get_redis() -> redis.Redis:
    """The initialized client. RuntimeError when Redis is not configured."""
    if _client is None:
        msg = "Redis is not configured"
        raise RuntimeError(msg)
    return _client


def get_optional_redis() -> redis.Redis | None:
    return _client


async def ping_redis() -> str | None:
    """Readiness status for Redis: "ok", an error string, or None when not configured."""
    if _client is None:
        return None
    try:
        await _client.ping()
    except RedisError as exc:
        return f"error: {exc}"
    return "ok"
