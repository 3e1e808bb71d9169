"""Best-effort Redis pub/sub broadcast of gamification events."""

from __future__ import annotations

import json
import logging

logger = logging.getLogger(__name__)

LEVEL_UP_CHANNEL = "pubsub:level_up"
ACHIEVEMENT_CHANNEL = "pubsub:achievement_unlocked"


async def publish_event(redis: object, channel: str, payload: dict) -> None:
    """Publish a JSON payload. A missing client or a publish failure is logged, never raised."""
    if redis is None:
        return
    try:
        await redis.publish(channel, json.dumps(payload))  # type: ignore[union-attr]
    except Exception:
        logger.warning("Failed to publish %s event", channel, exc_info=True)
