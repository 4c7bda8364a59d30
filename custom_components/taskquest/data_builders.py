"""Entity lifecycle management helpers.

This module is the SINGLE SOURCE OF TRUTH for:
- Entity field defaults
- Business logic validation
- Complete entity structure building

### Build Functions
Each entity type has a `build_<entity>()` function that:
- Takes service input (DATA_* keys)
- Generates the id (UUID) for new entities
- Sets created_at
- Applies field defaults
- Returns a complete entity dict ready for storage

Frequency and interval validation is delegated to the engines, so the same
errors (InvalidPolicyError, InvalidScheduleSpecError) surface here and in the
poll loop.

Consumers:
- services.py (programmatic entity management)
- managers (habit and reminder updates)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
import uuid

from . import const
from .engines.frequency_engine import FrequencyEngine
from .engines.habit_engine import HabitEngine
from .engines.reminder_engine import ReminderEngine
from .type_defs import HabitData, ReminderData
from .utils.dt_utils import dt_now_utc, dt_parse

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information.

    Attributes:
        field: The DATA_* key of the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(f"{field}: {translation_key}")


def _clean_title(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


# ==============================================================================
# HABITS
# ==============================================================================


def build_habit(
    user_input: dict[str, Any],
    existing: HabitData | None = None,
    reference: date | datetime | None = None,
) -> HabitData:
    """Build a complete habit from input, creating or updating.

    On update only the keys present in `user_input` change; completions are
    kept and every derived field is recomputed against the (possibly new)
    frequency.

    Raises:
        EntityValidationError: Missing or blank title.
        InvalidPolicyError: Malformed frequency / custom_days.
    """
    is_create = existing is None
    base: dict[str, Any] = dict(existing) if existing else {}

    def get_field(key: str, default: Any) -> Any:
        if key in user_input:
            return user_input[key]
        return base.get(key, default)

    title = _clean_title(get_field(const.DATA_TITLE, ""))
    if not title:
        raise EntityValidationError(
            field=const.DATA_TITLE,
            translation_key=const.TRANS_KEY_INVALID_TITLE,
        )

    frequency = get_field(const.DATA_HABIT_FREQUENCY, const.FREQUENCY_DAILY)
    custom_days = get_field(const.DATA_HABIT_CUSTOM_DAYS, [])
    # Validates and normalises (e.g. "every_1_days" -> "daily")
    frequency, custom_days = FrequencyEngine.to_raw(
        FrequencyEngine.parse_policy(frequency, custom_days)
    )

    habit: HabitData = {
        const.DATA_ID: base.get(const.DATA_ID) or str(uuid.uuid4()),
        const.DATA_OWNER_ID: str(get_field(const.DATA_OWNER_ID, const.DEFAULT_OWNER_ID)),
        const.DATA_TITLE: title,
        const.DATA_DESCRIPTION: str(get_field(const.DATA_DESCRIPTION, "") or ""),
        const.DATA_ICON: str(get_field(const.DATA_ICON, const.DEFAULT_HABIT_ICON)),
        const.DATA_HABIT_COLOR: str(
            get_field(const.DATA_HABIT_COLOR, const.DEFAULT_HABIT_COLOR)
        ),
        const.DATA_HABIT_FREQUENCY: frequency,
        const.DATA_HABIT_CUSTOM_DAYS: custom_days,
        const.DATA_CREATED_AT: (
            dt_now_utc().isoformat()
            if is_create
            else base.get(const.DATA_CREATED_AT, dt_now_utc().isoformat())
        ),
        const.DATA_HABIT_COMPLETIONS: list(base.get(const.DATA_HABIT_COMPLETIONS, [])),
        const.DATA_HABIT_BEST_STREAK: base.get(
            const.DATA_HABIT_BEST_STREAK, const.DEFAULT_ZERO
        ),
    }  # type: ignore[typeddict-item]

    if is_create and user_input.get(const.DATA_CREATED_AT):
        created_at = dt_parse(user_input[const.DATA_CREATED_AT])
        if created_at is not None:
            habit[const.DATA_CREATED_AT] = created_at.isoformat()

    return HabitEngine.recompute(habit, reference)


# ==============================================================================
# REMINDERS
# ==============================================================================


def build_reminder(
    user_input: dict[str, Any],
    existing: ReminderData | None = None,
) -> ReminderData:
    """Build a complete reminder from input, creating or updating.

    Raises:
        EntityValidationError: Missing title, unknown type or bad remind_at.
        InvalidScheduleSpecError: Ongoing reminder with a malformed interval.
    """
    is_create = existing is None
    base: dict[str, Any] = dict(existing) if existing else {}

    def get_field(key: str, default: Any) -> Any:
        if key in user_input:
            return user_input[key]
        return base.get(key, default)

    title = _clean_title(get_field(const.DATA_TITLE, ""))
    if not title:
        raise EntityValidationError(
            field=const.DATA_TITLE,
            translation_key=const.TRANS_KEY_INVALID_TITLE,
        )

    kind = get_field(const.DATA_REMINDER_TYPE, const.REMINDER_TYPE_ONE_TIME)
    if kind not in const.REMINDER_TYPES:
        raise EntityValidationError(
            field=const.DATA_REMINDER_TYPE,
            translation_key=const.TRANS_KEY_INVALID_REMINDER_TYPE,
            placeholders={"value": str(kind)},
        )

    remind_at_raw = get_field(const.DATA_REMINDER_REMIND_AT, None)
    remind_at = dt_parse(remind_at_raw)
    if remind_at is None:
        raise EntityValidationError(
            field=const.DATA_REMINDER_REMIND_AT,
            translation_key=const.TRANS_KEY_INVALID_REMIND_AT,
            placeholders={"value": str(remind_at_raw)},
        )

    reminder: ReminderData = {
        const.DATA_ID: base.get(const.DATA_ID) or str(uuid.uuid4()),
        const.DATA_OWNER_ID: str(get_field(const.DATA_OWNER_ID, const.DEFAULT_OWNER_ID)),
        const.DATA_TITLE: title,
        const.DATA_DESCRIPTION: str(get_field(const.DATA_DESCRIPTION, "") or ""),
        const.DATA_ICON: str(get_field(const.DATA_ICON, const.DEFAULT_REMINDER_ICON)),
        const.DATA_REMINDER_TYPE: kind,
        const.DATA_REMINDER_INTERVAL_UNIT: None,
        const.DATA_REMINDER_INTERVAL_VALUE: None,
        const.DATA_REMINDER_REMIND_AT: remind_at.isoformat(),
        const.DATA_REMINDER_IS_ACTIVE: bool(
            get_field(const.DATA_REMINDER_IS_ACTIVE, True)
        ),
        const.DATA_CREATED_AT: (
            dt_now_utc().isoformat()
            if is_create
            else base.get(const.DATA_CREATED_AT, dt_now_utc().isoformat())
        ),
    }  # type: ignore[typeddict-item]

    if kind == const.REMINDER_TYPE_ONGOING:
        reminder[const.DATA_REMINDER_INTERVAL_UNIT] = get_field(
            const.DATA_REMINDER_INTERVAL_UNIT, None
        )
        reminder[const.DATA_REMINDER_INTERVAL_VALUE] = get_field(
            const.DATA_REMINDER_INTERVAL_VALUE, None
        )
        ReminderEngine.parse_interval(reminder)

    return reminder
