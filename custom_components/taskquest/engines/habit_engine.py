"""Habit Engine - Completion ledger and derived habit snapshot.

A habit's completions are unique per calendar day. Every change to the
completion set (a toggle) or to the frequency policy (an edit) rebuilds all
derived fields in one step:

- current_streak / best_streak (StreakEngine)
- xp = completion days * 15 + streak bonus (ProgressionEngine)
- total_completions
- yearly_stats (StatisticsEngine)

Inputs are never mutated; every operation returns a new habit mapping.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
State management belongs in HabitManager.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any
import uuid

from .. import const
from ..utils.dt_utils import (
    dt_today_local,
    local_midnight_iso,
    start_of_week_sunday,
    to_calendar_day,
)
from .frequency_engine import Daily, FrequencyEngine, Weekly
from .progression_engine import ProgressionEngine
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine

if TYPE_CHECKING:
    from ..type_defs import CompletionData, HabitData
    from .frequency_engine import FrequencyPolicy


class HabitEngine:
    """Pure logic engine for the habit completion ledger.

    All methods are static - no instance state.
    """

    @staticmethod
    def policy_for(habit: HabitData | dict[str, Any]) -> FrequencyPolicy:
        """Parse the habit's raw frequency fields.

        Raises:
            InvalidPolicyError: If the stored frequency is malformed.
        """
        return FrequencyEngine.parse_policy(
            habit.get(const.DATA_HABIT_FREQUENCY),
            habit.get(const.DATA_HABIT_CUSTOM_DAYS),
        )

    @staticmethod
    def anchor_day(habit: HabitData | dict[str, Any]) -> date:
        """Return the habit's anchor day (local day of created_at)."""
        created_at = habit.get(const.DATA_CREATED_AT)
        if not created_at:
            return dt_today_local()
        return to_calendar_day(created_at)

    @staticmethod
    def completion_days(habit: HabitData | dict[str, Any]) -> list[date]:
        """Return the sorted, unique calendar days the habit was completed."""
        return StreakEngine.calendar_days(
            completion[const.DATA_COMPLETION_COMPLETED_AT]
            for completion in habit.get(const.DATA_HABIT_COMPLETIONS, [])
        )

    @staticmethod
    def is_completed_on(
        habit: HabitData | dict[str, Any], day: date | datetime
    ) -> bool:
        """Return True if a completion exists on the calendar day of `day`."""
        check_day = to_calendar_day(day)
        return any(
            to_calendar_day(completion[const.DATA_COMPLETION_COMPLETED_AT])
            == check_day
            for completion in habit.get(const.DATA_HABIT_COMPLETIONS, [])
        )

    @staticmethod
    def is_pending_on(
        habit: HabitData | dict[str, Any],
        day: date | datetime,
        policy: FrequencyPolicy | None = None,
    ) -> bool:
        """Return True if the habit is scheduled on `day` but not yet completed.

        A Weekly habit is satisfied by any completion in the Sunday-start week
        containing `day`, so it is only pending while that week has none.
        """
        if policy is None:
            policy = HabitEngine.policy_for(habit)
        if isinstance(policy, Weekly):
            week_start = start_of_week_sunday(to_calendar_day(day))
            return not any(
                0 <= (completed - week_start).days < 7
                for completed in HabitEngine.completion_days(habit)
            )
        return FrequencyEngine.is_scheduled(
            policy, day, HabitEngine.anchor_day(habit)
        ) and not HabitEngine.is_completed_on(habit, day)

    @staticmethod
    def build_completion(owner_id: str, day: date) -> CompletionData:
        """Create a completion record stamped at local midnight of `day`."""
        return {
            const.DATA_ID: str(uuid.uuid4()),
            const.DATA_OWNER_ID: owner_id,
            const.DATA_COMPLETION_COMPLETED_AT: local_midnight_iso(day),
        }

    @staticmethod
    def toggle_completion(
        habit: HabitData,
        day: date | datetime,
        reference: date | datetime | None = None,
    ) -> HabitData:
        """Add or remove the completion for one calendar day.

        If a completion exists on that day it is removed, otherwise one is
        added. All derived fields are then recomputed against `reference`
        (today when omitted).

        Returns:
            A new habit mapping; `habit` is left untouched.

        Raises:
            InvalidPolicyError: If the habit's frequency is malformed.
        """
        toggle_day = to_calendar_day(day)
        existing = list(habit.get(const.DATA_HABIT_COMPLETIONS, []))
        kept = [
            completion
            for completion in existing
            if to_calendar_day(completion[const.DATA_COMPLETION_COMPLETED_AT])
            != toggle_day
        ]

        if len(kept) == len(existing):
            owner_id = habit.get(const.DATA_OWNER_ID, const.DEFAULT_OWNER_ID)
            kept.append(HabitEngine.build_completion(owner_id, toggle_day))

        updated: HabitData = {**habit, const.DATA_HABIT_COMPLETIONS: kept}  # type: ignore[misc]
        return HabitEngine.recompute(updated, reference)

    @staticmethod
    def recompute(
        habit: HabitData, reference: date | datetime | None = None
    ) -> HabitData:
        """Rebuild every derived field from completions and the policy.

        The previously stored best streak is merged in, so best never shrinks.

        Returns:
            A new habit mapping with current_streak, best_streak, xp,
            total_completions and yearly_stats refreshed.

        Raises:
            InvalidPolicyError: If the habit's frequency is malformed.
        """
        reference_day = (
            to_calendar_day(reference) if reference is not None else dt_today_local()
        )
        policy = HabitEngine.policy_for(habit)
        days = HabitEngine.completion_days(habit)

        streak = StreakEngine.compute_streak(
            days,
            policy,
            reference_day,
            previous_best=habit.get(const.DATA_HABIT_BEST_STREAK, const.DEFAULT_ZERO),
        )
        yearly = StatisticsEngine().yearly_stats(
            days, policy, HabitEngine.anchor_day(habit), reference_day
        )

        frequency, custom_days = FrequencyEngine.to_raw(policy)

        return {  # type: ignore[return-value]
            **habit,
            const.DATA_HABIT_FREQUENCY: frequency,
            const.DATA_HABIT_CUSTOM_DAYS: custom_days,
            const.DATA_HABIT_CURRENT_STREAK: streak.current,
            const.DATA_HABIT_BEST_STREAK: streak.best,
            const.DATA_HABIT_XP: ProgressionEngine.habit_xp(len(days), streak.bonus_xp),
            const.DATA_HABIT_TOTAL_COMPLETIONS: len(days),
            const.DATA_HABIT_YEARLY_STATS: yearly,
        }

    @staticmethod
    def count_pending(
        habits: list[HabitData], day: date | datetime
    ) -> int:
        """Count habits still pending on `day` (see is_pending_on).

        A habit whose stored frequency cannot be parsed is treated as Daily
        here so a bad record still gets nudged. A habit with unparseable
        timestamps is logged and left out of the count.
        """
        pending = 0
        for habit in habits:
            try:
                policy = HabitEngine.policy_for(habit)
            except ValueError as err:
                const.LOGGER.warning(
                    "WARNING: Habit '%s' has an invalid frequency, treating as daily: %s",
                    habit.get(const.DATA_ID),
                    err,
                )
                policy = Daily()
            try:
                if HabitEngine.is_pending_on(habit, day, policy):
                    pending += 1
            except (KeyError, ValueError) as err:
                const.LOGGER.warning(
                    "WARNING: Skipping habit '%s' in pending count: %s",
                    habit.get(const.DATA_ID),
                    err,
                )
        return pending
