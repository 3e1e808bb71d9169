"""Level table tests — stored levels were computed from these exact values."""

import pytest

from taskquest.gamification.level_thresholds import (
    LEVEL_THRESHOLDS,
    MAX_LEVEL,
    compute_level,
    level_for,
    progress_within_level,
)


class TestLevelTable:
    def test_table_is_exact(self):
        assert LEVEL_THRESHOLDS == (
            0, 100, 250, 500, 1000, 2000, 3500, 5500, 8000, 11000,
            14500, 18500, 23000, 28000, 33500, 39500, 46000, 53000, 60500, 68500,
            77000, 86000, 95500, 105500, 116000, 127000, 138500, 150500, 163000, 176000,
        )

    def test_thirty_levels(self):
        assert MAX_LEVEL == 30
        assert len(LEVEL_THRESHOLDS) == MAX_LEVEL

    def test_strictly_increasing(self):
        assert all(a < b for a, b in zip(LEVEL_THRESHOLDS, LEVEL_THRESHOLDS[1:]))

    def test_table_is_immutable(self):
        with pytest.raises(TypeError):
            LEVEL_THRESHOLDS[0] = 1  # type: ignore[index]


class TestLevelFor:
    @pytest.mark.parametrize(
        ("total_xp", "expected"),
        [
            (0, 1),
            (99, 1),
            (100, 2),
            (249, 2),
            (250, 3),
            (999, 4),
            (1000, 5),
            (10999, 9),
            (11000, 10),
            (175999, 29),
            (176000, 30),
            (10_000_000, 30),
        ],
    )
    def test_boundaries(self, total_xp, expected):
        assert level_for(total_xp) == expected

    def test_negative_total_is_level_one(self):
        assert level_for(-50) == 1

    def test_every_threshold_starts_its_level(self):
        for index, threshold in enumerate(LEVEL_THRESHOLDS):
            assert level_for(threshold) == index + 1
            if threshold > 0:
                assert level_for(threshold - 1) == index

    def test_monotonic(self):
        levels = [level_for(xp) for xp in range(0, 180_000, 250)]
        assert levels == sorted(levels)


class TestProgressWithinLevel:
    def test_start_of_game(self):
        assert progress_within_level(0) == (0, 100)

    def test_mid_level(self):
        # Level 2 spans 100..250
        assert progress_within_level(150) == (50, 150)

    def test_progress_always_below_level_size(self):
        for xp in range(0, 176_000, 777):
            into, size = progress_within_level(xp)
            assert 0 <= into < size

    def test_max_level_has_no_next_threshold(self):
        assert progress_within_level(176_000) == (0, 0)
        assert progress_within_level(200_000) == (24_000, 0)


class TestComputeLevel:
    def test_level_one(self):
        info = compute_level(0)
        assert info == {
            "level": 1,
            "xp_into_level": 0,
            "xp_for_level": 100,
            "next_level": 2,
            "xp_to_next_level": 100,
            "is_max_level": False,
        }

    def test_xp_to_next_level(self):
        info = compute_level(90)
        assert info["level"] == 1
        assert info["xp_to_next_level"] == 10

    def test_max_level_is_clamped(self):
        info = compute_level(500_000)
        assert info["level"] == MAX_LEVEL
        assert info["is_max_level"] is True
        assert info["next_level"] == MAX_LEVEL
        assert info["xp_to_next_level"] == 0
        assert info["xp_for_level"] == 0
