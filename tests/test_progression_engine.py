"""Tests for ProgressionEngine - pure logic, no HA fixtures needed."""

from __future__ import annotations

import pytest

from custom_components.taskquest.engines.errors import InvalidXpError
from custom_components.taskquest.engines.progression_engine import (
    ProgressionEngine,
    level_info,
)

# =============================================================================
# TEST: LEVEL REQUIREMENTS
# =============================================================================


class TestRequiredXp:
    """XP needed to complete a level."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [(1, 100), (2, 120), (3, 140), (100, 2080), (101, 2080), (500, 2080)],
    )
    def test_required_xp(self, level: int, expected: int) -> None:
        assert ProgressionEngine.required_xp(level) == expected


# =============================================================================
# TEST: LEVEL BREAKDOWN
# =============================================================================


class TestLevelInfo:
    """Cumulative XP to level / XP into level / progress."""

    def test_zero(self) -> None:
        info = level_info(0)
        assert info.level == 1
        assert info.current_level_xp == 0
        assert info.next_level_xp == 100
        assert info.progress == 0.0

    def test_exact_level_boundary(self) -> None:
        """100 XP completes level 1 exactly."""
        info = level_info(100)
        assert info.level == 2
        assert info.current_level_xp == 0
        assert info.next_level_xp == 120

    def test_just_below_next_level(self) -> None:
        info = level_info(219)
        assert info.level == 2
        assert info.current_level_xp == 119
        assert info.next_level_xp == 120
        assert info.progress == pytest.approx(99.1667, abs=0.001)

    def test_level_three(self) -> None:
        info = level_info(220)
        assert info.level == 3
        assert info.current_level_xp == 0

    def test_cap_level_reached(self) -> None:
        """Sum of levels 1..99 is the XP needed to reach level 100."""
        to_cap = sum(ProgressionEngine.required_xp(lvl) for lvl in range(1, 100))
        info = level_info(to_cap)
        assert info.level == 100
        assert info.current_level_xp == 0
        assert info.next_level_xp == 2080

    def test_levels_past_cap_cost_the_same(self) -> None:
        to_cap = sum(ProgressionEngine.required_xp(lvl) for lvl in range(1, 100))
        info = level_info(to_cap + 3 * 2080 + 5)
        assert info.level == 103
        assert info.current_level_xp == 5
        assert info.next_level_xp == 2080

    def test_as_dict(self) -> None:
        assert level_info(130).as_dict() == {
            "level": 2,
            "current_level_xp": 30,
            "next_level_xp": 120,
            "progress": pytest.approx(25.0),
            "total_xp": 130,
        }

    @pytest.mark.parametrize("bad", [-1, "100", None, True])
    def test_invalid_xp(self, bad: object) -> None:
        with pytest.raises(InvalidXpError) as err:
            level_info(bad)  # type: ignore[arg-type]
        assert err.value.total_xp == bad

    def test_monotonic(self) -> None:
        """Level never decreases as XP grows."""
        previous = 1
        for xp in range(0, 5000, 7):
            current = level_info(xp).level
            assert current >= previous
            previous = current


# =============================================================================
# TEST: XP SOURCES
# =============================================================================


class TestXpSources:
    """Habit XP, task XP and the persisted total."""

    def test_habit_xp(self) -> None:
        assert ProgressionEngine.habit_xp(4, 10) == 70

    def test_task_xp(self) -> None:
        assert ProgressionEngine.task_xp(3) == 30

    def test_merge_total_sums_sources(self) -> None:
        assert ProgressionEngine.merge_total_xp(0, 30, [70, 15]) == 115

    def test_merge_total_never_decreases(self) -> None:
        """Removing habit XP cannot lower the persisted total."""
        assert ProgressionEngine.merge_total_xp(200, 30, [15]) == 200
