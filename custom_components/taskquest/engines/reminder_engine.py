"""Reminder Engine for TaskQuest.

State machine per reminder:

    Scheduled --(now >= remind_at, active, not yet fired)--> Fired
    Fired --one-time--> Deleted
    Fired --ongoing---> Scheduled (remind_at advanced by one interval)

Ongoing reminders advance from the *previous* remind_at, never from "now", so
a late poll does not shift the series. Months use calendar arithmetic with
end-of-month clamping (dateutil.relativedelta).

Dedupe: each (reminder id, remind_at) pair fires at most once per
ReminderCheckContext. The host creates one context at start-up and passes it
to every poll; it is never persisted, so a restart starts with an empty set.

The engine also decides the evening habit nudge: at 20:00 local time, if any
habit is scheduled today and not completed, one notification per day.

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
The only mutable state is the ReminderCheckContext the caller owns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING, Any

from .. import const
from ..utils.dt_utils import as_local, as_utc, dt_add_interval, dt_parse
from .errors import InvalidScheduleSpecError
from .habit_engine import HabitEngine

if TYPE_CHECKING:
    from ..type_defs import HabitData, ReminderData

DEFAULT_NUDGE_WINDOW = timedelta(minutes=1)


# =============================================================================
# Check Context and Results
# =============================================================================


@dataclass
class ReminderCheckContext:
    """Dedupe memory for one host process.

    Holds the keys of every notification already emitted. Created at host
    start-up, cleared on restart, never persisted.
    """

    notified: set[str] = field(default_factory=set)

    def has_fired(self, key: str) -> bool:
        """Return True if a notification with this key was already emitted."""
        return key in self.notified

    def mark_fired(self, key: str) -> None:
        """Remember that a notification with this key was emitted."""
        self.notified.add(key)

    def clear(self) -> None:
        """Forget every emitted key."""
        self.notified.clear()


@dataclass(frozen=True)
class ReminderFiring:
    """Outcome of firing one reminder.

    Attributes:
        reminder_id: The reminder that fired
        dedupe_key: Key recorded in the check context
        title: Notification title (icon + title)
        message: Notification body
        action: REMINDER_ACTION_DELETE, _RESCHEDULE or _UNCHANGED
        next_remind_at: New ISO remind_at for a reschedule, else None
        error: Scheduling error that forced the reminder to stay unchanged
    """

    reminder_id: str
    dedupe_key: str
    title: str
    message: str
    action: str
    next_remind_at: str | None = None
    error: InvalidScheduleSpecError | None = None


@dataclass(frozen=True)
class HabitNudge:
    """The once-per-day evening reminder about unfinished habits."""

    dedupe_key: str
    pending_count: int
    title: str
    message: str


# =============================================================================
# Reminder Engine
# =============================================================================


class ReminderEngine:
    """Pure logic engine for reminder scheduling.

    All methods are static - the only state lives in ReminderCheckContext.
    """

    @staticmethod
    def parse_interval(reminder: ReminderData | dict[str, Any]) -> tuple[str, int]:
        """Validate and return (interval_unit, interval_value) of an ongoing reminder.

        Raises:
            InvalidScheduleSpecError: Unknown unit or a value that is not an
                integer >= 1.
        """
        unit = reminder.get(const.DATA_REMINDER_INTERVAL_UNIT)
        value = reminder.get(const.DATA_REMINDER_INTERVAL_VALUE)

        if unit not in const.REMINDER_INTERVAL_UNITS or (
            isinstance(value, bool) or not isinstance(value, int) or value < 1
        ):
            raise InvalidScheduleSpecError(
                reminder.get(const.DATA_ID), unit, value
            )
        return unit, value

    @staticmethod
    def remind_at(reminder: ReminderData | dict[str, Any]) -> datetime:
        """Return the reminder's remind_at as an aware datetime.

        Raises:
            ValueError: If remind_at is missing or cannot be parsed.
        """
        raw = reminder.get(const.DATA_REMINDER_REMIND_AT)
        parsed = dt_parse(raw)
        if parsed is None:
            raise ValueError(f"Unparseable remind_at: {raw!r}")
        return parsed

    @staticmethod
    def next_remind_at(reminder: ReminderData | dict[str, Any]) -> datetime:
        """Advance an ongoing reminder's remind_at by one interval.

        Counts from the stored remind_at, not from the current time.

        Raises:
            InvalidScheduleSpecError: If the interval is malformed.
        """
        unit, value = ReminderEngine.parse_interval(reminder)
        base = ReminderEngine.remind_at(reminder)
        result = dt_add_interval(base, unit, value)
        if result is None:
            raise InvalidScheduleSpecError(reminder.get(const.DATA_ID), unit, value)
        return result

    @staticmethod
    def dedupe_key(reminder: ReminderData | dict[str, Any]) -> str:
        """Return the fire-once key for the reminder's current remind_at."""
        return const.REMINDER_DEDUPE_KEY_FMT.format(
            reminder.get(const.DATA_ID),
            reminder.get(const.DATA_REMINDER_REMIND_AT),
        )

    @staticmethod
    def is_due(
        reminder: ReminderData | dict[str, Any],
        now: datetime,
        context: ReminderCheckContext,
    ) -> bool:
        """Return True when the reminder should fire on this poll.

        Raises:
            ValueError: If remind_at cannot be parsed.
        """
        if not reminder.get(const.DATA_REMINDER_IS_ACTIVE, True):
            return False
        if context.has_fired(ReminderEngine.dedupe_key(reminder)):
            return False
        return as_utc(now) >= as_utc(ReminderEngine.remind_at(reminder))

    @staticmethod
    def fire(reminder: ReminderData | dict[str, Any]) -> ReminderFiring:
        """Build the notification and the follow-up action for a due reminder.

        One-time reminders are deleted. Ongoing reminders are rescheduled one
        interval after their previous remind_at. A malformed interval leaves
        the reminder unchanged; the notification still goes out.
        """
        reminder_id = reminder.get(const.DATA_ID, "")
        icon = reminder.get(const.DATA_ICON) or const.DEFAULT_REMINDER_ICON
        title = f"{icon} {reminder.get(const.DATA_TITLE, '')}".strip()
        message = (
            reminder.get(const.DATA_DESCRIPTION)
            or const.NOTIFY_REMINDER_DEFAULT_MESSAGE
        )
        key = ReminderEngine.dedupe_key(reminder)
        kind = reminder.get(const.DATA_REMINDER_TYPE)

        if kind == const.REMINDER_TYPE_ONE_TIME:
            return ReminderFiring(
                reminder_id=reminder_id,
                dedupe_key=key,
                title=title,
                message=message,
                action=const.REMINDER_ACTION_DELETE,
            )

        try:
            if kind != const.REMINDER_TYPE_ONGOING:
                raise InvalidScheduleSpecError(
                    reminder_id,
                    reminder.get(const.DATA_REMINDER_INTERVAL_UNIT),
                    reminder.get(const.DATA_REMINDER_INTERVAL_VALUE),
                )
            next_at = ReminderEngine.next_remind_at(reminder)
        except InvalidScheduleSpecError as err:
            const.LOGGER.error(
                "ERROR: Reminder '%s' (%s) cannot be rescheduled: %s",
                reminder_id,
                kind,
                err,
            )
            return ReminderFiring(
                reminder_id=reminder_id,
                dedupe_key=key,
                title=title,
                message=message,
                action=const.REMINDER_ACTION_UNCHANGED,
                error=err,
            )

        return ReminderFiring(
            reminder_id=reminder_id,
            dedupe_key=key,
            title=title,
            message=message,
            action=const.REMINDER_ACTION_RESCHEDULE,
            next_remind_at=next_at.isoformat(),
        )

    @staticmethod
    def check_reminders(
        reminders: list[ReminderData] | list[dict[str, Any]],
        now: datetime,
        context: ReminderCheckContext,
    ) -> list[ReminderFiring]:
        """Fire every due reminder once and record it in the context.

        A reminder whose remind_at cannot be parsed is logged and skipped
        without blocking the others.
        """
        firings: list[ReminderFiring] = []
        for reminder in reminders:
            try:
                due = ReminderEngine.is_due(reminder, now, context)
            except ValueError as err:
                const.LOGGER.warning(
                    "WARNING: Skipping reminder '%s': %s",
                    reminder.get(const.DATA_ID),
                    err,
                )
                continue
            if not due:
                continue

            firing = ReminderEngine.fire(reminder)
            context.mark_fired(firing.dedupe_key)
            const.LOGGER.debug(
                "DEBUG: Reminder '%s' fired, action=%s, next=%s",
                firing.reminder_id,
                firing.action,
                firing.next_remind_at,
            )
            firings.append(firing)
        return firings

    @staticmethod
    def check_habit_nudge(
        habits: list[HabitData],
        now: datetime,
        context: ReminderCheckContext,
        window: timedelta = DEFAULT_NUDGE_WINDOW,
    ) -> HabitNudge | None:
        """Return the evening habit nudge if it is due on this poll.

        The nudge is due when local time falls in [20:00, 20:00 + window) and
        at least one habit is scheduled today without a completion. It fires at
        most once per local day per context.
        """
        local_now = as_local(now)
        nudge_at = datetime.combine(
            local_now.date(),
            time(const.HABIT_NUDGE_HOUR, const.HABIT_NUDGE_MINUTE),
            tzinfo=local_now.tzinfo,
        )
        if not nudge_at <= local_now < nudge_at + max(window, DEFAULT_NUDGE_WINDOW):
            return None

        key = const.HABIT_NUDGE_DEDUPE_KEY_FMT.format(local_now.date().isoformat())
        if context.has_fired(key):
            return None

        pending = HabitEngine.count_pending(habits, local_now.date())
        if pending == 0:
            return None

        context.mark_fired(key)
        return HabitNudge(
            dedupe_key=key,
            pending_count=pending,
            title=const.NOTIFY_HABIT_NUDGE_TITLE,
            message=const.NOTIFY_HABIT_NUDGE_MESSAGE_FMT.format(pending),
        )
