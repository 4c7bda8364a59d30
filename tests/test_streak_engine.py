"""Tests for StreakEngine - pure logic, no HA fixtures needed.

Covers run detection, lapse against the reference day, the bonus ladder and
merging with a previously recorded best streak.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from custom_components.taskquest.engines.frequency_engine import (
    Daily,
    EveryNDays,
    FrequencyPolicy,
    SpecificDays,
    Weekly,
)
from custom_components.taskquest.engines.streak_engine import (
    StreakEngine,
    compute_streak,
)

# =============================================================================
# Helper Functions
# =============================================================================

BASE = date(2025, 1, 1)


def day(n: int) -> date:
    """Return BASE + n days."""
    return BASE + timedelta(days=n)


def days(*offsets: int) -> list[date]:
    """Return calendar days for offsets from BASE."""
    return [day(n) for n in offsets]


# =============================================================================
# TEST: STREAK RUNS
# =============================================================================


class TestComputeStreak:
    """Current / best streak under various policies."""

    def test_no_completions(self) -> None:
        result = compute_streak([], Daily(), day(0))
        assert (result.current, result.best, result.bonus_xp) == (0, 0, 0)

    def test_single_completion_today(self) -> None:
        result = compute_streak(days(5), Daily(), day(5))
        assert (result.current, result.best, result.bonus_xp) == (1, 1, 0)

    def test_gap_breaks_run(self) -> None:
        """Days 1,2,3,5 judged on day 6: current 1, best 3."""
        result = compute_streak(days(1, 2, 3, 5), Daily(), day(6))
        assert result.current == 1
        assert result.best == 3

    def test_current_lapses_after_max_gap(self) -> None:
        """Last completion two days before the reference is no longer live."""
        result = compute_streak(days(1, 2, 3), Daily(), day(5))
        assert result.current == 0
        assert result.best == 3

    def test_unordered_and_duplicate_input(self) -> None:
        ordered = compute_streak(days(1, 2, 3), Daily(), day(3))
        shuffled = compute_streak(days(3, 1, 2, 2, 3), Daily(), day(3))
        assert shuffled == ordered

    def test_timestamps_on_same_day_count_once(self) -> None:
        result = compute_streak(
            ["2025-01-02T08:00:00+00:00", "2025-01-02T21:00:00+00:00"],
            Daily(),
            day(1),
        )
        assert result.current == 1

    def test_every_n_days_live_and_lapsed(self) -> None:
        """EveryNDays(3) with days 0,3,6,9: live on day 12, lapsed on day 13."""
        completions = days(0, 3, 6, 9)

        live = compute_streak(completions, EveryNDays(3), day(12))
        assert live.current == 4
        assert live.best == 4

        lapsed = compute_streak(completions, EveryNDays(3), day(13))
        assert lapsed.current == 0
        assert lapsed.best == 4

    def test_every_n_days_tolerates_early_completion(self) -> None:
        """Any gap up to n keeps the run alive."""
        result = compute_streak(days(0, 2, 5), EveryNDays(3), day(5))
        assert result.current == 3

    def test_weekly_uses_one_day_gap(self) -> None:
        result = compute_streak(days(0, 7), Weekly(), day(7))
        assert result.current == 1
        assert result.best == 1

    def test_specific_days_uses_one_day_gap(self) -> None:
        """Monday then Wednesday does not chain (gap 2 > 1)."""
        mon_wed = SpecificDays(frozenset({1, 3}))
        result = compute_streak(
            [date(2025, 3, 3), date(2025, 3, 5)], mon_wed, date(2025, 3, 5)
        )
        assert result.current == 1
        assert result.best == 1

    @pytest.mark.parametrize(
        ("policy", "offsets"),
        [
            (Daily(), (0, 1, 2, 4)),
            (Weekly(), (0, 1, 2, 4)),
            (SpecificDays(frozenset(range(7))), (0, 1, 2, 4)),
            (EveryNDays(3), (0, 3, 6, 10)),
        ],
        ids=["daily", "weekly", "specific_days", "every_3_days"],
    )
    def test_gap_one_past_max_restarts_run(
        self, policy: FrequencyPolicy, offsets: tuple[int, ...]
    ) -> None:
        """A gap of max gap + 1 restarts current at 1 and keeps best."""
        result = compute_streak(days(*offsets), policy, day(offsets[-1]))
        assert result.current == 1
        assert result.best == 3

    def test_previous_best_is_kept(self) -> None:
        result = compute_streak(days(1, 2), Daily(), day(2), previous_best=9)
        assert result.current == 2
        assert result.best == 9


# =============================================================================
# TEST: BONUS XP
# =============================================================================


class TestStreakBonus:
    """Bonus ladder: 2 XP per streak day, capped at 20 per step."""

    def test_step_bonus_ladder(self) -> None:
        assert StreakEngine.step_bonus(2) == 4
        assert StreakEngine.step_bonus(10) == 20
        assert StreakEngine.step_bonus(11) == 20

    def test_three_day_run(self) -> None:
        """Steps to run length 2 and 3 earn 4 + 6."""
        result = compute_streak(days(0, 1, 2), Daily(), day(2))
        assert result.bonus_xp == 10

    def test_bonus_counts_every_run(self) -> None:
        """A broken history still earns the bonus of each run."""
        result = compute_streak(days(0, 1, 5, 6), Daily(), day(6))
        assert result.bonus_xp == 8

    def test_long_run_hits_cap(self) -> None:
        result = compute_streak(days(*range(15)), Daily(), day(14))
        # run lengths 2..10 earn 4..20, lengths 11..15 earn the cap
        assert result.bonus_xp == sum(range(4, 21, 2)) + 5 * 20
        assert result.current == 15

    def test_bonus_ignores_reference(self) -> None:
        """A lapsed streak keeps the bonus it already earned."""
        live = compute_streak(days(0, 1, 2), Daily(), day(2))
        lapsed = compute_streak(days(0, 1, 2), Daily(), day(30))
        assert live.bonus_xp == lapsed.bonus_xp
