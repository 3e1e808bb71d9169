"""Level thresholds and computation.

The table is cumulative XP per level: level L starts at LEVEL_THRESHOLDS[L - 1].
Stored user levels were computed from exactly these values, so they MUST NOT
change. Every display path goes through this module.
"""

from __future__ import annotations

from bisect import bisect_right

LEVEL_THRESHOLDS: tuple[int, ...] = (
    0, 100, 250, 500, 1000, 2000, 3500, 5500, 8000, 11000,
    14500, 18500, 23000, 28000, 33500, 39500, 46000, 53000, 60500, 68500,
    77000, 86000, 95500, 105500, 116000, 127000, 138500, 150500, 163000, 176000,
)

MAX_LEVEL: int = len(LEVEL_THRESHOLDS)


def level_for(total_xp: int) -> int:
    """Highest level whose threshold is <= total_xp. Never below 1."""
    return max(1, bisect_right(LEVEL_THRESHOLDS, total_xp))


def progress_within_level(total_xp: int) -> tuple[int, int]:
    """Return (xp_into_level, xp_for_level).

    At MAX_LEVEL the next threshold is unreachable and xp_for_level is 0.
    """
    level = level_for(total_xp)
    start = LEVEL_THRESHOLDS[level - 1]
    xp_into_level = max(0, total_xp - start)
    if level >= MAX_LEVEL:
        return xp_into_level, 0
    return xp_into_level, LEVEL_THRESHOLDS[level] - start


def compute_level(total_xp: int) -> dict:
    """Compute display level info from total XP."""
    level = level_for(total_xp)
    xp_into_level, xp_for_level = progress_within_level(total_xp)
    is_max_level = level >= MAX_LEVEL

    return {
        "level": level,
        "xp_into_level": xp_into_level,
        "xp_for_level": xp_for_level,
        "next_level": level if is_max_level else level + 1,
        "xp_to_next_level": 0 if is_max_level else LEVEL_THRESHOLDS[level] - total_xp,
        "is_max_level": is_max_level,
    }
