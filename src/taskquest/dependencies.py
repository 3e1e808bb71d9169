"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

from taskquest.redis_client import get_optional_redis


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client, or None when Redis is not configured."""
    yield get_optional_redis()
