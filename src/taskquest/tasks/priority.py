"""Task priorities, statuses and the XP each priority is worth."""

from __future__ import annotations

from types import MappingProxyType
from typing import Literal

Priority = Literal["Low", "Medium", "High", "Urgent"]
Status = Literal["open", "completed", "archived"]

PRIORITY_XP = MappingProxyType({
    "Low": 10,
    "Medium": 25,
    "High": 50,
    "Urgent": 75,
})

# Higher rank sorts first under the default ordering.
PRIORITY_RANK = MappingProxyType({
    "Low": 1,
    "Medium": 2,
    "High": 3,
    "Urgent": 4,
})

STATUS_OPEN = "open"
STATUS_COMPLETED = "completed"
STATUS_ARCHIVED = "archived"

PAGE_SIZES = (10, 25, 50)
DEFAULT_PAGE_SIZE = 25


def xp_for_priority(priority: str) -> int:
    """XP a task of this priority is worth. KeyError for unknown priorities."""
    return PRIORITY_XP[priority]
