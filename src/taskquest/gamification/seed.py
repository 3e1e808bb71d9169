"""Achievement seed data: the static catalog upserted on startup."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskquest.db.models import Achievement

logger = logging.getLogger(__name__)

ACHIEVEMENT_SEED_DATA: list[dict] = [
    # Task milestones
    {
        "slug": "first_task",
        "name": "First Steps",
        "description": "Complete your very first task",
        "achievement_type": "task_milestone",
        "requirement_value": 1,
        "sort_order": 1,
    },
    {
        "slug": "tasks_10",
        "name": "Getting Things Done",
        "description": "Complete 10 tasks",
        "achievement_type": "task_milestone",
        "requirement_value": 10,
        "sort_order": 2,
    },
    {
        "slug": "tasks_25",
        "name": "Productivity Pro",
        "description": "Complete 25 tasks",
        "achievement_type": "task_milestone",
        "requirement_value": 25,
        "sort_order": 3,
    },
    {
        "slug": "tasks_50",
        "name": "Task Master",
        "description": "Complete 50 tasks",
        "achievement_type": "task_milestone",
        "requirement_value": 50,
        "sort_order": 4,
    },
    {
        "slug": "tasks_100",
        "name": "Centurion",
        "description": "Complete 100 tasks. Nothing stands in your way.",
        "achievement_type": "task_milestone",
        "requirement_value": 100,
        "sort_order": 5,
    },
    # Level milestones
    {
        "slug": "level_5",
        "name": "Rising Star",
        "description": "Reach level 5",
        "achievement_type": "level_milestone",
        "requirement_value": 5,
        "sort_order": 10,
    },
    {
        "slug": "level_10",
        "name": "Seasoned",
        "description": "Reach level 10",
        "achievement_type": "level_milestone",
        "requirement_value": 10,
        "sort_order": 11,
    },
    {
        "slug": "level_20",
        "name": "Veteran",
        "description": "Reach level 20",
        "achievement_type": "level_milestone",
        "requirement_value": 20,
        "sort_order": 12,
    },
    {
        "slug": "level_30",
        "name": "Legend",
        "description": "Reach the maximum level",
        "achievement_type": "level_milestone",
        "requirement_value": 30,
        "sort_order": 13,
    },
    # Special
    {
        "slug": "efficiency_master",
        "name": "Efficiency Master",
        "description": "Complete every Urgent task due this week",
        "achievement_type": "special",
        "requirement_value": None,
        "sort_order": 20,
    },
]


async def seed_achievements(db: AsyncSession) -> int:
    """Upsert every achievement definition by slug. Returns number seeded."""
    result = await db.execute(select(Achievement))
    existing = {a.slug: a for a in result.scalars()}

    seeded = 0
    for data in ACHIEVEMENT_SEED_DATA:
        achievement = existing.get(data["slug"])
        if achievement is None:
            db.add(Achievement(**data))
        else:
            for field, value in data.items():
                setattr(achievement, field, value)
        seeded += 1

    await db.commit()
    logger.info("Seeded %d achievement definitions", seeded)
    return seeded
