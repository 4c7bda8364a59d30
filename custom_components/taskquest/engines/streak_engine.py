"""Streak Engine for TaskQuest.

Computes current streak, best streak and streak bonus XP from a completion
history and a frequency policy.

A run extends while consecutive completion days are at most `max_gap` days
apart (1 for daily-style policies, n for EveryNDays). The run ending at the
last completion is the current streak, but only while the reference day is
still within `max_gap` of that last completion.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import days_between, to_calendar_day
from .frequency_engine import FrequencyEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .frequency_engine import FrequencyPolicy


@dataclass(frozen=True)
class StreakResult:
    """Outcome of a streak computation.

    Attributes:
        current: Length of the live run ending at the last completion (0 if lapsed)
        best: Longest run ever seen, never below the previously recorded best
        bonus_xp: Sum of per-step streak bonuses over the whole history
    """

    current: int
    best: int
    bonus_xp: int


class StreakEngine:
    """Pure logic engine for streak computation.

    All methods are static - no instance state.
    """

    @staticmethod
    def calendar_days(values: Iterable[str | date | datetime]) -> list[date]:
        """Reduce timestamps to a sorted, de-duplicated list of calendar days."""
        return sorted({to_calendar_day(value) for value in values})

    @staticmethod
    def step_bonus(run_length: int) -> int:
        """Return the bonus earned by the step that brought a run to `run_length`."""
        return min(run_length * const.STREAK_BONUS_PER_DAY, const.STREAK_BONUS_CAP)

    @staticmethod
    def compute_streak(
        completions: Iterable[str | date | datetime],
        policy: FrequencyPolicy,
        reference: date | datetime,
        previous_best: int = 0,
    ) -> StreakResult:
        """Compute streak figures for a completion history.

        Args:
            completions: Completion timestamps or days (any order, duplicates ok)
            policy: Frequency policy that defines the allowed gap
            reference: The "today" the current streak is judged against
            previous_best: Previously recorded best streak to merge in

        Returns:
            StreakResult with current, best and bonus_xp.

        Examples:
            Daily, days 1,2,3,5, reference day 6 → current=1, best=3
            EveryNDays(3), days 0,3,6,9, reference day 12 → current=4
        """
        days = StreakEngine.calendar_days(completions)
        previous_best = max(previous_best or 0, 0)

        if not days:
            return StreakResult(current=0, best=previous_best, bonus_xp=0)

        max_gap = FrequencyEngine.max_gap(policy)

        run = 1
        best = 1
        bonus_xp = 0
        for prev_day, day in zip(days, days[1:], strict=False):
            if days_between(prev_day, day) <= max_gap:
                run += 1
                bonus_xp += StreakEngine.step_bonus(run)
            else:
                run = 1
            best = max(best, run)

        reference_day = to_calendar_day(reference)
        current = run if days_between(days[-1], reference_day) <= max_gap else 0

        return StreakResult(
            current=current,
            best=max(best, previous_best),
            bonus_xp=bonus_xp,
        )


def compute_streak(
    completions: Iterable[str | date | datetime],
    policy: FrequencyPolicy,
    reference: date | datetime,
    previous_best: int = 0,
) -> StreakResult:
    """Compute streak figures (see StreakEngine.compute_streak)."""
    return StreakEngine.compute_streak(completions, policy, reference, previous_best)
