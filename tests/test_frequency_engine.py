"""Tests for FrequencyEngine - pure logic, no HA fixtures needed.

Weekdays use 0=Sunday .. 6=Saturday throughout.
"""

from __future__ import annotations

from datetime import date

import pytest

from custom_components.taskquest import const
from custom_components.taskquest.engines.errors import InvalidPolicyError
from custom_components.taskquest.engines.frequency_engine import (
    Daily,
    EveryNDays,
    FrequencyEngine,
    SpecificDays,
    Weekly,
    is_scheduled,
    parse_policy,
)

ANCHOR = date(2025, 3, 2)  # a Sunday

# =============================================================================
# TEST: PARSING
# =============================================================================


class TestParsePolicy:
    """Raw frequency strings to policy variants."""

    def test_daily(self) -> None:
        assert parse_policy("daily") == Daily()

    def test_weekly(self) -> None:
        assert parse_policy("weekly") == Weekly()

    def test_case_and_whitespace_insensitive(self) -> None:
        assert parse_policy("  Daily ") == Daily()

    def test_specific_days(self) -> None:
        policy = parse_policy("specific_days", [1, 3, 5])
        assert policy == SpecificDays(frozenset({1, 3, 5}))

    def test_every_n_days(self) -> None:
        assert parse_policy("every_3_days") == EveryNDays(3)

    def test_every_one_day_is_daily(self) -> None:
        """every_1_days collapses to Daily."""
        assert parse_policy("every_1_days") == Daily()

    @pytest.mark.parametrize(
        "raw",
        ["every_0_days", "every_-2_days", "every_x_days", "every__days"],
    )
    def test_every_n_days_invalid(self, raw: str) -> None:
        with pytest.raises(InvalidPolicyError):
            parse_policy(raw)

    @pytest.mark.parametrize("raw", ["monthly", "", None, "sometimes"])
    def test_unknown_frequency(self, raw: str | None) -> None:
        with pytest.raises(InvalidPolicyError) as err:
            parse_policy(raw)
        assert err.value.frequency == raw

    def test_specific_days_empty(self) -> None:
        with pytest.raises(InvalidPolicyError):
            parse_policy("specific_days", [])

    def test_specific_days_missing(self) -> None:
        with pytest.raises(InvalidPolicyError):
            parse_policy("specific_days", None)

    @pytest.mark.parametrize("bad_day", [7, -1, "1", 2.5])
    def test_specific_days_out_of_range(self, bad_day: object) -> None:
        with pytest.raises(InvalidPolicyError):
            parse_policy("specific_days", [1, bad_day])

    def test_error_is_value_error(self) -> None:
        """Callers that only know ValueError still catch policy errors."""
        with pytest.raises(ValueError):
            parse_policy("monthly")

    def test_every_n_days_constructor_rejects_zero(self) -> None:
        with pytest.raises(InvalidPolicyError):
            EveryNDays(0)


class TestToRaw:
    """Policies back to stored fields."""

    def test_round_trip_normalises(self) -> None:
        assert FrequencyEngine.to_raw(parse_policy("every_1_days")) == (
            const.FREQUENCY_DAILY,
            [],
        )
        assert FrequencyEngine.to_raw(SpecificDays(frozenset({5, 1}))) == (
            const.FREQUENCY_SPECIFIC_DAYS,
            [1, 5],
        )
        assert FrequencyEngine.to_raw(EveryNDays(4)) == ("every_4_days", [])


# =============================================================================
# TEST: SCHEDULING
# =============================================================================


class TestIsScheduled:
    """is_scheduled per policy variant."""

    def test_daily_and_weekly_every_day(self) -> None:
        for offset in range(14):
            day = date(2025, 3, 2 + offset)
            assert is_scheduled(Daily(), day, ANCHOR)
            assert is_scheduled(Weekly(), day, ANCHOR)

    def test_specific_days_uses_sunday_first(self) -> None:
        policy = SpecificDays(frozenset({0, 6}))  # weekends
        assert is_scheduled(policy, date(2025, 3, 2), ANCHOR)  # Sunday
        assert is_scheduled(policy, date(2025, 3, 8), ANCHOR)  # Saturday
        assert not is_scheduled(policy, date(2025, 3, 3), ANCHOR)  # Monday

    def test_every_n_days_from_anchor(self) -> None:
        policy = EveryNDays(3)
        assert is_scheduled(policy, date(2025, 3, 2), ANCHOR)
        assert not is_scheduled(policy, date(2025, 3, 3), ANCHOR)
        assert not is_scheduled(policy, date(2025, 3, 4), ANCHOR)
        assert is_scheduled(policy, date(2025, 3, 5), ANCHOR)
        assert is_scheduled(policy, date(2025, 3, 14), ANCHOR)

    def test_every_n_days_before_anchor(self) -> None:
        """Days before the anchor are never scheduled."""
        assert not is_scheduled(EveryNDays(3), date(2025, 2, 27), ANCHOR)

    def test_datetime_truncated_to_day(self) -> None:
        assert is_scheduled(
            SpecificDays(frozenset({0})), "2025-03-02T23:59:00+00:00", ANCHOR
        )


class TestMaxGap:
    """Allowed gap between completions."""

    @pytest.mark.parametrize(
        ("policy", "expected"),
        [
            (Daily(), 1),
            (Weekly(), 1),
            (SpecificDays(frozenset({1, 3})), 1),
            (EveryNDays(5), 5),
        ],
    )
    def test_max_gap(self, policy: object, expected: int) -> None:
        assert FrequencyEngine.max_gap(policy) == expected  # type: ignore[arg-type]
