"""Priority → XP mapping tests."""

import pytest

from taskquest.tasks.priority import PRIORITY_RANK, PRIORITY_XP, xp_for_priority


class TestPriorityXP:
    @pytest.mark.parametrize(
        ("priority", "xp"),
        [("Low", 10), ("Medium", 25), ("High", 50), ("Urgent", 75)],
    )
    def test_values(self, priority, xp):
        assert xp_for_priority(priority) == xp

    def test_only_four_priorities(self):
        assert set(PRIORITY_XP) == {"Low", "Medium", "High", "Urgent"}

    def test_unknown_priority(self):
        with pytest.raises(KeyError):
            xp_for_priority("Critical")

    def test_mapping_is_read_only(self):
        with pytest.raises(TypeError):
            PRIORITY_XP["Low"] = 1000  # type: ignore[index]

    def test_rank_orders_urgent_first(self):
        ranked = sorted(PRIORITY_RANK, key=PRIORITY_RANK.__getitem__, reverse=True)
        assert ranked == ["Urgent", "High", "Medium", "Low"]
