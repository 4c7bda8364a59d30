"""Frequency Engine for TaskQuest.

Recurrence rules for habits as a closed set of policy variants:

- `Daily`: every calendar day
- `Weekly`: any day is a valid occurrence window (no day-of-week inferred)
- `SpecificDays`: only the listed weekdays (0=Sunday .. 6=Saturday)
- `EveryNDays`: every n-th day counted from the habit's anchor date

Persisted habits store the frequency as a raw string plus `custom_days`. The
raw form is parsed exactly once at the boundary (`parse_policy`) and written
back with `to_raw`. Everything past the boundary works with policy objects.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
Only import from const.py, type_defs.py, utils and standard libraries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from .. import const
from ..utils.dt_utils import days_between, to_calendar_day, weekday_sunday_first
from .errors import InvalidPolicyError

# =============================================================================
# Policy Variants
# =============================================================================


@dataclass(frozen=True)
class Daily:
    """Scheduled every calendar day."""


@dataclass(frozen=True)
class Weekly:
    """Scheduled on any day of the week.

    Deliberately coarser than SpecificDays: the policy only says "once a week",
    so every day is an acceptable occurrence window.
    """


@dataclass(frozen=True)
class SpecificDays:
    """Scheduled on a fixed set of weekdays (0=Sunday .. 6=Saturday)."""

    days: frozenset[int]

    def __post_init__(self) -> None:
        """Reject empty or out-of-range weekday sets."""
        if not self.days:
            raise InvalidPolicyError(
                const.FREQUENCY_SPECIFIC_DAYS,
                "at least one weekday is required",
                custom_days=sorted(self.days),
            )
        for day in self.days:
            if not _is_weekday_index(day):
                raise InvalidPolicyError(
                    const.FREQUENCY_SPECIFIC_DAYS,
                    f"weekday {day!r} is outside 0-6",
                    custom_days=sorted(self.days, key=str),
                )


@dataclass(frozen=True)
class EveryNDays:
    """Scheduled every n-th day counted from the anchor date."""

    n: int

    def __post_init__(self) -> None:
        """Reject non-positive intervals."""
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n < 1:
            raise InvalidPolicyError(
                const.FREQUENCY_EVERY_N_DAYS_FMT.format(self.n),
                "interval must be an integer >= 1",
            )


FrequencyPolicy = Daily | Weekly | SpecificDays | EveryNDays


def _is_weekday_index(value: Any) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and const.WEEKDAY_SUNDAY <= value <= const.WEEKDAY_SATURDAY
    )


# =============================================================================
# Frequency Engine
# =============================================================================


class FrequencyEngine:
    """Pure logic engine for frequency policies.

    All methods are static - no instance state.
    """

    @staticmethod
    def parse_policy(
        frequency: str | None, custom_days: list[int] | None = None
    ) -> FrequencyPolicy:
        """Parse a raw frequency string into a policy.

        Args:
            frequency: "daily", "weekly", "specific_days" or "every_<n>_days"
            custom_days: Weekday list (0=Sunday), used by "specific_days" only

        Returns:
            The matching policy variant. "every_1_days" yields Daily.

        Raises:
            InvalidPolicyError: Unknown frequency, n < 1, or bad custom_days.
        """
        if not isinstance(frequency, str) or not frequency.strip():
            raise InvalidPolicyError(frequency, "frequency is required", custom_days)

        raw = frequency.strip().lower()

        if raw == const.FREQUENCY_DAILY:
            return Daily()

        if raw == const.FREQUENCY_WEEKLY:
            return Weekly()

        if raw == const.FREQUENCY_SPECIFIC_DAYS:
            if not isinstance(custom_days, (list, tuple, set, frozenset)):
                raise InvalidPolicyError(
                    frequency, "custom_days must be a list of weekdays", custom_days
                )
            return SpecificDays(frozenset(custom_days))

        if raw.startswith(const.FREQUENCY_EVERY_N_DAYS_PREFIX) and raw.endswith(
            const.FREQUENCY_EVERY_N_DAYS_SUFFIX
        ):
            count = raw[
                len(const.FREQUENCY_EVERY_N_DAYS_PREFIX) : -len(
                    const.FREQUENCY_EVERY_N_DAYS_SUFFIX
                )
            ]
            if not count.isdigit():
                raise InvalidPolicyError(
                    frequency, "interval must be a positive integer", custom_days
                )
            n = int(count)
            if n < 1:
                raise InvalidPolicyError(
                    frequency, "interval must be an integer >= 1", custom_days
                )
            if n == 1:
                return Daily()
            return EveryNDays(n)

        raise InvalidPolicyError(frequency, "unknown frequency", custom_days)

    @staticmethod
    def to_raw(policy: FrequencyPolicy) -> tuple[str, list[int]]:
        """Serialise a policy back to (frequency, custom_days)."""
        if isinstance(policy, Daily):
            return const.FREQUENCY_DAILY, []
        if isinstance(policy, Weekly):
            return const.FREQUENCY_WEEKLY, []
        if isinstance(policy, SpecificDays):
            return const.FREQUENCY_SPECIFIC_DAYS, sorted(policy.days)
        if isinstance(policy, EveryNDays):
            return const.FREQUENCY_EVERY_N_DAYS_FMT.format(policy.n), []
        raise InvalidPolicyError(policy, "not a frequency policy")

    @staticmethod
    def is_scheduled(
        policy: FrequencyPolicy,
        day: date | datetime,
        anchor: date | datetime,
    ) -> bool:
        """Return True when `day` is an occurrence under `policy`.

        Args:
            policy: The frequency policy
            day: Calendar day to test (datetimes are truncated to local day)
            anchor: The habit's anchor day (creation day); only EveryNDays uses it

        Raises:
            InvalidPolicyError: If the policy is not a known variant.
        """
        if isinstance(policy, (Daily, Weekly)):
            return True

        check_day = to_calendar_day(day)

        if isinstance(policy, SpecificDays):
            return weekday_sunday_first(check_day) in policy.days

        if isinstance(policy, EveryNDays):
            offset = days_between(to_calendar_day(anchor), check_day)
            if offset < 0:
                return False
            return offset % policy.n == 0

        raise InvalidPolicyError(policy, "not a frequency policy")

    @staticmethod
    def max_gap(policy: FrequencyPolicy) -> int:
        """Return the largest day-difference that keeps a streak alive.

        1 for Daily, Weekly and SpecificDays; n for EveryNDays.
        """
        if isinstance(policy, EveryNDays):
            return policy.n
        if isinstance(policy, (Daily, Weekly, SpecificDays)):
            return 1
        raise InvalidPolicyError(policy, "not a frequency policy")


# =============================================================================
# Module-level convenience functions
# =============================================================================


def parse_policy(
    frequency: str | None, custom_days: list[int] | None = None
) -> FrequencyPolicy:
    """Parse raw habit frequency fields (see FrequencyEngine.parse_policy)."""
    return FrequencyEngine.parse_policy(frequency, custom_days)


def is_scheduled(
    policy: FrequencyPolicy, day: date | datetime, anchor: date | datetime
) -> bool:
    """Return True when `day` is scheduled (see FrequencyEngine.is_scheduled)."""
    return FrequencyEngine.is_scheduled(policy, day, anchor)
