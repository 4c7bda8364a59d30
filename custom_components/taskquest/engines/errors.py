"""Engine error taxonomy.

All engine failures are raised synchronously as `ValueError` subclasses that
carry the offending values as attributes. The host turns them into
`HomeAssistantError` at the service boundary.
"""

from __future__ import annotations

from typing import Any


class TaskQuestEngineError(ValueError):
    """Base class for all TaskQuest engine errors."""


class InvalidPolicyError(TaskQuestEngineError):
    """Raised when a frequency policy is malformed.

    Attributes:
        frequency: The raw frequency value that was rejected
        custom_days: The raw custom days, if any
        reason: Human-readable explanation
    """

    def __init__(
        self,
        frequency: Any,
        reason: str,
        custom_days: Any = None,
    ) -> None:
        """Initialize InvalidPolicyError."""
        self.frequency = frequency
        self.custom_days = custom_days
        self.reason = reason
        super().__init__(
            f"Invalid frequency policy {frequency!r} "
            f"(custom_days={custom_days!r}): {reason}"
        )


class InvalidXpError(TaskQuestEngineError):
    """Raised when an XP total is negative.

    Attributes:
        total_xp: The rejected value
    """

    def __init__(self, total_xp: Any) -> None:
        """Initialize InvalidXpError."""
        self.total_xp = total_xp
        super().__init__(f"Total XP must be a non-negative number, got {total_xp!r}")


class InvalidScheduleSpecError(TaskQuestEngineError):
    """Raised when a reminder's interval is malformed.

    Attributes:
        reminder_id: The reminder being scheduled
        interval_unit: The raw unit value
        interval_value: The raw value
    """

    def __init__(
        self,
        reminder_id: str | None,
        interval_unit: Any,
        interval_value: Any,
    ) -> None:
        """Initialize InvalidScheduleSpecError."""
        self.reminder_id = reminder_id
        self.interval_unit = interval_unit
        self.interval_value = interval_value
        super().__init__(
            f"Invalid interval for reminder {reminder_id}: "
            f"unit={interval_unit!r}, value={interval_value!r}"
        )
