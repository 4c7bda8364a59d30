"""Statistics Engine - Yearly achievement tracking for habits.

Computes how many scheduled occurrences of a habit fell inside the calendar
year of a reference day, and how many of them were achieved.

Design Principles:
    - Stateless: No coordinator reference, operates on passed data structures
    - Consistent: Scheduling decisions delegate to FrequencyEngine
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import start_of_week_sunday, to_calendar_day
from ..utils.math_utils import calculate_percentage
from .frequency_engine import FrequencyEngine, Weekly

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ..type_defs import YearlyStatsData
    from .frequency_engine import FrequencyPolicy


class StatisticsEngine:
    """Engine for yearly habit statistics.

    Rules:
    - Daily, SpecificDays, EveryNDays: each scheduled day of the year is one
      expected occurrence, achieved if a completion exists on that day.
    - Weekly: each Sunday-start week intersecting the year is one expected
      occurrence, achieved if any completion falls inside that week.

    All methods are stateless - they operate on data passed as arguments.

    Example:
        stats = StatisticsEngine()
        yearly = stats.yearly_stats(days, Daily(), anchor, date(2025, 6, 1))
        rate = stats.completion_rate(yearly)
    """

    # ────────────────────────────────────────────────────────────────
    # Period Helpers
    # ────────────────────────────────────────────────────────────────

    @staticmethod
    def year_bounds(reference: date) -> tuple[date, date]:
        """Return (Jan 1, Dec 31) of the reference day's year."""
        return date(reference.year, 1, 1), date(reference.year, 12, 31)

    @staticmethod
    def weeks_of_year(reference: date) -> list[date]:
        """Return the Sunday starting each week that intersects the year.

        The first week may start in December of the previous year.
        """
        start, end = StatisticsEngine.year_bounds(reference)
        week = start_of_week_sunday(start)
        weeks: list[date] = []
        while week <= end:
            weeks.append(week)
            week += timedelta(days=const.DAYS_PER_WEEK)
        return weeks

    # ────────────────────────────────────────────────────────────────
    # Yearly Stats
    # ────────────────────────────────────────────────────────────────

    def yearly_stats(
        self,
        completions: Iterable[str | date | datetime],
        policy: FrequencyPolicy,
        anchor: date | datetime,
        reference: date | datetime,
    ) -> YearlyStatsData:
        """Count achieved vs. expected occurrences in the reference year.

        Args:
            completions: Completion timestamps or days
            policy: Habit frequency policy
            anchor: Habit anchor day (creation day)
            reference: Any day inside the year to report on

        Returns:
            {"achieved", "total_expected", "year"}
        """
        reference_day = to_calendar_day(reference)
        anchor_day = to_calendar_day(anchor)
        completion_days = {to_calendar_day(value) for value in completions}

        if isinstance(policy, Weekly):
            achieved, expected = self._weekly_counts(completion_days, reference_day)
        else:
            achieved, expected = self._daily_counts(
                completion_days, policy, anchor_day, reference_day
            )

        return {
            const.DATA_YEARLY_ACHIEVED: achieved,
            const.DATA_YEARLY_TOTAL_EXPECTED: expected,
            const.DATA_YEARLY_YEAR: reference_day.year,
        }

    def _daily_counts(
        self,
        completion_days: set[date],
        policy: FrequencyPolicy,
        anchor: date,
        reference: date,
    ) -> tuple[int, int]:
        start, end = self.year_bounds(reference)
        achieved = 0
        expected = 0
        day = start
        while day <= end:
            if FrequencyEngine.is_scheduled(policy, day, anchor):
                expected += 1
                if day in completion_days:
                    achieved += 1
            day += timedelta(days=1)
        return achieved, expected

    def _weekly_counts(
        self, completion_days: set[date], reference: date
    ) -> tuple[int, int]:
        weeks = self.weeks_of_year(reference)
        completed_weeks = {start_of_week_sunday(day) for day in completion_days}
        achieved = sum(1 for week in weeks if week in completed_weeks)
        return achieved, len(weeks)

    @staticmethod
    def completion_rate(stats: YearlyStatsData) -> float:
        """Return achieved / expected as a percentage (2 decimals, 0 if none)."""
        return calculate_percentage(
            stats[const.DATA_YEARLY_ACHIEVED],
            stats[const.DATA_YEARLY_TOTAL_EXPECTED],
            const.DATA_FLOAT_PRECISION,
        )
