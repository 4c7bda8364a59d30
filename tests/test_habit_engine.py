"""Tests for HabitEngine - completion ledger and derived snapshot.

Pure logic, no HA fixtures needed. Calendar days are UTC unless a test
switches the default timezone.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import date
import logging
from typing import Any
from zoneinfo import ZoneInfo

import pytest

from custom_components.taskquest import const
from custom_components.taskquest.engines.errors import InvalidPolicyError
from custom_components.taskquest.engines.habit_engine import HabitEngine
from custom_components.taskquest.utils import dt_utils

# =============================================================================
# Helper Functions
# =============================================================================


def make_habit(
    frequency: str = const.FREQUENCY_DAILY,
    custom_days: list[int] | None = None,
    created_at: str = "2025-01-01T00:00:00+00:00",
    completed_on: list[date] | None = None,
) -> dict[str, Any]:
    """Create a stored habit for testing."""
    return {
        const.DATA_ID: "habit-1",
        const.DATA_OWNER_ID: const.DEFAULT_OWNER_ID,
        const.DATA_TITLE: "Read",
        const.DATA_ICON: const.DEFAULT_HABIT_ICON,
        const.DATA_HABIT_COLOR: const.DEFAULT_HABIT_COLOR,
        const.DATA_HABIT_FREQUENCY: frequency,
        const.DATA_HABIT_CUSTOM_DAYS: custom_days or [],
        const.DATA_CREATED_AT: created_at,
        const.DATA_HABIT_COMPLETIONS: [
            HabitEngine.build_completion(const.DEFAULT_OWNER_ID, day)
            for day in completed_on or []
        ],
        const.DATA_HABIT_BEST_STREAK: 0,
    }


# =============================================================================
# TEST: TOGGLE
# =============================================================================


class TestToggleCompletion:
    """Adding and removing a day's completion."""

    def test_toggle_adds_completion(self) -> None:
        habit = HabitEngine.toggle_completion(
            make_habit(), date(2025, 1, 1), reference=date(2025, 1, 1)
        )
        assert habit[const.DATA_HABIT_TOTAL_COMPLETIONS] == 1
        assert habit[const.DATA_HABIT_CURRENT_STREAK] == 1
        assert habit[const.DATA_HABIT_BEST_STREAK] == 1
        assert habit[const.DATA_HABIT_XP] == 15
        completion = habit[const.DATA_HABIT_COMPLETIONS][0]
        assert completion[const.DATA_COMPLETION_COMPLETED_AT] == (
            "2025-01-01T00:00:00+00:00"
        )
        assert completion[const.DATA_OWNER_ID] == const.DEFAULT_OWNER_ID

    def test_toggle_twice_removes_completion(self) -> None:
        """Toggling the same day again undoes the completion."""
        once = HabitEngine.toggle_completion(
            make_habit(), date(2025, 1, 1), reference=date(2025, 1, 1)
        )
        twice = HabitEngine.toggle_completion(
            once, date(2025, 1, 1), reference=date(2025, 1, 1)
        )
        assert twice[const.DATA_HABIT_COMPLETIONS] == []
        assert twice[const.DATA_HABIT_CURRENT_STREAK] == 0
        assert twice[const.DATA_HABIT_XP] == 0
        # Best streak is a record; it survives the undo
        assert twice[const.DATA_HABIT_BEST_STREAK] == 1

    def test_toggle_matches_any_time_on_that_day(self) -> None:
        habit = make_habit(completed_on=[date(2025, 1, 2)])
        toggled = HabitEngine.toggle_completion(
            habit, "2025-01-02T18:45:00+00:00", reference=date(2025, 1, 2)
        )
        assert toggled[const.DATA_HABIT_COMPLETIONS] == []

    def test_toggle_does_not_mutate_input(self) -> None:
        habit = make_habit(completed_on=[date(2025, 1, 1)])
        snapshot = deepcopy(habit)
        HabitEngine.toggle_completion(habit, date(2025, 1, 2), date(2025, 1, 2))
        assert habit == snapshot

    def test_three_day_streak_xp(self) -> None:
        """3 completions (45) plus streak bonus 4 + 6."""
        habit = make_habit()
        for day in (date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)):
            habit = HabitEngine.toggle_completion(habit, day, reference=day)
        assert habit[const.DATA_HABIT_CURRENT_STREAK] == 3
        assert habit[const.DATA_HABIT_XP] == 55

    def test_toggle_off_then_on_restores_history(self) -> None:
        """Undoing a middle day and redoing it gives back the same snapshot."""
        reference = date(2025, 1, 3)
        original = HabitEngine.recompute(
            make_habit(
                completed_on=[date(2025, 1, 1), date(2025, 1, 2), date(2025, 1, 3)]
            ),
            reference,
        )
        off = HabitEngine.toggle_completion(original, date(2025, 1, 2), reference)
        assert off[const.DATA_HABIT_CURRENT_STREAK] == 1
        back = HabitEngine.toggle_completion(off, date(2025, 1, 2), reference)

        assert HabitEngine.completion_days(back) == HabitEngine.completion_days(
            original
        )
        assert back[const.DATA_HABIT_XP] == original[const.DATA_HABIT_XP] == 55
        assert back[const.DATA_HABIT_CURRENT_STREAK] == 3
        assert back[const.DATA_HABIT_BEST_STREAK] == 3

    def test_toggle_uses_local_calendar_day(self) -> None:
        """03:00 UTC on Jan 2 is still Jan 1 in New York."""
        dt_utils.set_default_timezone(ZoneInfo("America/New_York"))
        habit = HabitEngine.toggle_completion(
            make_habit(created_at="2025-01-01T12:00:00-05:00"),
            "2025-01-02T03:00:00+00:00",
            reference=date(2025, 1, 1),
        )
        assert HabitEngine.completion_days(habit) == [date(2025, 1, 1)]
        assert habit[const.DATA_HABIT_COMPLETIONS][0][
            const.DATA_COMPLETION_COMPLETED_AT
        ] == ("2025-01-01T00:00:00-05:00")

    def test_toggle_invalid_frequency(self) -> None:
        with pytest.raises(InvalidPolicyError):
            HabitEngine.toggle_completion(
                make_habit(frequency="monthly"), date(2025, 1, 1), date(2025, 1, 1)
            )


# =============================================================================
# TEST: RECOMPUTE
# =============================================================================


class TestRecompute:
    """Derived fields rebuilt from completions and policy."""

    def test_recompute_normalises_frequency(self) -> None:
        habit = HabitEngine.recompute(
            make_habit(frequency="every_1_days"), date(2025, 1, 1)
        )
        assert habit[const.DATA_HABIT_FREQUENCY] == const.FREQUENCY_DAILY
        assert habit[const.DATA_HABIT_CUSTOM_DAYS] == []

    def test_streak_lapses_with_reference(self) -> None:
        habit = make_habit(completed_on=[date(2025, 1, 1), date(2025, 1, 2)])
        live = HabitEngine.recompute(habit, date(2025, 1, 3))
        lapsed = HabitEngine.recompute(habit, date(2025, 1, 4))
        assert live[const.DATA_HABIT_CURRENT_STREAK] == 2
        assert lapsed[const.DATA_HABIT_CURRENT_STREAK] == 0
        assert lapsed[const.DATA_HABIT_BEST_STREAK] == 2
        # XP does not depend on the reference day
        assert live[const.DATA_HABIT_XP] == lapsed[const.DATA_HABIT_XP] == 34

    def test_frequency_change_rescores_history(self) -> None:
        """Switching to every_3_days lets a 2-day gap keep the run."""
        habit = make_habit(completed_on=[date(2025, 1, 1), date(2025, 1, 3)])
        daily = HabitEngine.recompute(habit, date(2025, 1, 3))
        assert daily[const.DATA_HABIT_CURRENT_STREAK] == 1

        habit[const.DATA_HABIT_FREQUENCY] = "every_3_days"
        habit[const.DATA_HABIT_BEST_STREAK] = 0
        relaxed = HabitEngine.recompute(habit, date(2025, 1, 3))
        assert relaxed[const.DATA_HABIT_CURRENT_STREAK] == 2

    def test_yearly_stats_attached(self) -> None:
        habit = HabitEngine.recompute(
            make_habit(completed_on=[date(2025, 3, 1)]), date(2025, 3, 1)
        )
        assert habit[const.DATA_HABIT_YEARLY_STATS] == {
            const.DATA_YEARLY_ACHIEVED: 1,
            const.DATA_YEARLY_TOTAL_EXPECTED: 365,
            const.DATA_YEARLY_YEAR: 2025,
        }

    def test_previous_best_streak_kept(self) -> None:
        habit = make_habit(completed_on=[date(2025, 1, 1)])
        habit[const.DATA_HABIT_BEST_STREAK] = 12
        assert HabitEngine.recompute(habit, date(2025, 1, 1))[
            const.DATA_HABIT_BEST_STREAK
        ] == 12


# =============================================================================
# TEST: PENDING
# =============================================================================


class TestPending:
    """Scheduled-but-not-completed checks used by the evening nudge."""

    def test_daily_pending_until_completed(self) -> None:
        habit = make_habit()
        assert HabitEngine.is_pending_on(habit, date(2025, 1, 5))
        done = HabitEngine.toggle_completion(habit, date(2025, 1, 5), date(2025, 1, 5))
        assert not HabitEngine.is_pending_on(done, date(2025, 1, 5))

    def test_every_n_days_off_day_not_pending(self) -> None:
        habit = make_habit(frequency="every_2_days")
        assert HabitEngine.is_pending_on(habit, date(2025, 1, 3))
        assert not HabitEngine.is_pending_on(habit, date(2025, 1, 4))

    def test_specific_days(self) -> None:
        habit = make_habit(frequency="specific_days", custom_days=[1])  # Mondays
        assert HabitEngine.is_pending_on(habit, date(2025, 1, 6))
        assert not HabitEngine.is_pending_on(habit, date(2025, 1, 7))

    def test_count_pending_treats_bad_frequency_as_daily(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        habits = [
            make_habit(),
            make_habit(frequency="monthly"),
            make_habit(completed_on=[date(2025, 1, 5)]),
        ]
        with caplog.at_level(logging.WARNING):
            assert HabitEngine.count_pending(habits, date(2025, 1, 5)) == 2
        assert "invalid frequency" in caplog.text

    def test_count_pending_skips_unparseable_timestamps(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A corrupt record is logged and the rest still get counted."""
        bad_completion = make_habit()
        bad_completion[const.DATA_HABIT_COMPLETIONS] = [
            {const.DATA_COMPLETION_COMPLETED_AT: "not-a-date"}
        ]
        habits = [
            make_habit(created_at="garbage"),
            bad_completion,
            make_habit(),
        ]
        with caplog.at_level(logging.WARNING):
            assert HabitEngine.count_pending(habits, date(2025, 1, 5)) == 1
        assert caplog.text.count("Skipping habit") == 2

    def test_weekly_pending_until_done_that_week(self) -> None:
        """Week of Sun 2025-01-05 .. Sat 2025-01-11."""
        habit = make_habit(
            frequency=const.FREQUENCY_WEEKLY, completed_on=[date(2025, 1, 4)]
        )
        assert HabitEngine.is_pending_on(habit, date(2025, 1, 7))
        done = HabitEngine.toggle_completion(habit, date(2025, 1, 6), date(2025, 1, 6))
        assert not HabitEngine.is_pending_on(done, date(2025, 1, 7))
        assert not HabitEngine.is_pending_on(done, date(2025, 1, 11))
        assert HabitEngine.is_pending_on(done, date(2025, 1, 12))
