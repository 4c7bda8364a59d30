"""Reminder Manager - Reminder CRUD and the per-poll firing check.

This manager handles all reminder-related operations:
- Create / delete / (de)activate reminders
- On every coordinator poll: fire due reminders, deliver their
  notifications, then delete (one-time) or reschedule (ongoing) them
- The evening habit nudge

The dedupe memory (ReminderCheckContext) is created with the manager, i.e.
once per integration start-up, and is never persisted.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.core import callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.event import async_track_time_interval

from .. import const, data_builders as db
from ..engines.reminder_engine import (
    HabitNudge,
    ReminderCheckContext,
    ReminderEngine,
    ReminderFiring,
)
from ..utils.dt_utils import dt_now_utc
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import TaskQuestDataCoordinator
    from ..type_defs import ReminderData


class ReminderManager(BaseManager):
    """Manager for reminders and their notifications.

    Responsibilities:
    - Persist reminder changes through the storage manager
    - Run the engine check on each poll and apply its outcome
    - Emit SIGNAL_SUFFIX_REMINDER_FIRED events
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: TaskQuestDataCoordinator
    ) -> None:
        """Initialize the ReminderManager with a fresh check context."""
        super().__init__(hass, coordinator)
        self.context = ReminderCheckContext()

    async def async_setup(self) -> None:
        """Register the poll heartbeat.

        The coordinator has no entity listeners, so it never schedules its own
        refresh; this timer drives it every check_interval instead.
        """
        interval = self.coordinator.update_interval or timedelta(
            seconds=const.DEFAULT_CHECK_INTERVAL
        )
        unsub = async_track_time_interval(
            self.hass, self._on_poll_tick, interval, cancel_on_shutdown=True
        )
        self.coordinator.config_entry.async_on_unload(unsub)
        const.LOGGER.debug(
            "DEBUG: Reminder poll registered every %s for entry %s",
            interval,
            self.entry_id,
        )

    @callback
    def _on_poll_tick(self, _now: datetime) -> None:
        """Run one coordinator refresh per heartbeat."""
        self.hass.async_create_task(self.coordinator.async_refresh())

    # =========================================================================
    # Queries
    # =========================================================================

    def list_reminders(self, owner_id: str | None = None) -> list[ReminderData]:
        """Return every reminder, optionally for one owner."""
        return self.storage.list(const.DATA_REMINDERS, owner_id)  # type: ignore[return-value]

    def get_reminder(self, reminder_id: str) -> ReminderData:
        """Return a reminder by id.

        Raises:
            HomeAssistantError: If the reminder does not exist.
        """
        reminder = self.storage.get(const.DATA_REMINDERS, reminder_id)
        if reminder is None:
            raise HomeAssistantError(
                const.ERROR_REMINDER_NOT_FOUND_FMT.format(reminder_id)
            )
        return reminder  # type: ignore[return-value]

    # =========================================================================
    # CRUD
    # =========================================================================

    def add_reminder(self, user_input: dict[str, Any]) -> ReminderData:
        """Create and store a new reminder.

        Raises:
            EntityValidationError / InvalidScheduleSpecError: Bad input.
        """
        reminder = db.build_reminder(user_input)
        self.storage.put(const.DATA_REMINDERS, reminder)
        const.LOGGER.info(
            "INFO: Added %s reminder '%s' at %s",
            reminder[const.DATA_REMINDER_TYPE],
            reminder[const.DATA_ID],
            reminder[const.DATA_REMINDER_REMIND_AT],
        )
        self.coordinator._persist()  # pylint: disable=protected-access
        return reminder

    def delete_reminder(self, reminder_id: str) -> None:
        """Delete a reminder.

        Raises:
            HomeAssistantError: Unknown reminder.
        """
        if not self.storage.delete(const.DATA_REMINDERS, reminder_id):
            raise HomeAssistantError(
                const.ERROR_REMINDER_NOT_FOUND_FMT.format(reminder_id)
            )
        const.LOGGER.info("INFO: Deleted reminder '%s'", reminder_id)
        self.coordinator._persist()  # pylint: disable=protected-access

    def set_active(self, reminder_id: str, is_active: bool) -> ReminderData:
        """Activate or deactivate a reminder.

        Raises:
            HomeAssistantError: Unknown reminder.
        """
        reminder = self.get_reminder(reminder_id)
        updated: ReminderData = {**reminder, const.DATA_REMINDER_IS_ACTIVE: is_active}  # type: ignore[misc]
        self.storage.put(const.DATA_REMINDERS, updated)
        const.LOGGER.info(
            "INFO: Reminder '%s' is now %s",
            reminder_id,
            "active" if is_active else "inactive",
        )
        self.coordinator._persist()  # pylint: disable=protected-access
        return updated

    # =========================================================================
    # Poll checks
    # =========================================================================

    async def async_check_reminders(
        self, now: datetime | None = None
    ) -> list[ReminderFiring]:
        """Fire due reminders, deliver notifications and apply the follow-up.

        Returns:
            The firings emitted on this poll.
        """
        now = now or dt_now_utc()
        firings = ReminderEngine.check_reminders(
            self.list_reminders(), now, self.context
        )
        if not firings:
            return firings

        for firing in firings:
            await self.coordinator.notification_manager.async_send(
                firing.title, firing.message
            )
            self._apply_firing(firing)
            self.emit(
                const.SIGNAL_SUFFIX_REMINDER_FIRED,
                reminder_id=firing.reminder_id,
                action=firing.action,
                next_remind_at=firing.next_remind_at,
            )

        self.coordinator._persist()  # pylint: disable=protected-access
        return firings

    def _apply_firing(self, firing: ReminderFiring) -> None:
        if firing.action == const.REMINDER_ACTION_DELETE:
            self.storage.delete(const.DATA_REMINDERS, firing.reminder_id)
            const.LOGGER.info(
                "INFO: One-time reminder '%s' fired and was removed",
                firing.reminder_id,
            )
            return

        if firing.action == const.REMINDER_ACTION_RESCHEDULE:
            reminder = self.storage.get(const.DATA_REMINDERS, firing.reminder_id)
            if reminder is None:
                return
            reminder[const.DATA_REMINDER_REMIND_AT] = firing.next_remind_at
            const.LOGGER.info(
                "INFO: Reminder '%s' rescheduled to %s",
                firing.reminder_id,
                firing.next_remind_at,
            )
            return

        const.LOGGER.warning(
            "WARNING: Reminder '%s' left unchanged after firing: %s",
            firing.reminder_id,
            firing.error,
        )

    async def async_check_habit_nudge(
        self, now: datetime | None = None
    ) -> HabitNudge | None:
        """Send the evening habit nudge if it is due on this poll."""
        now = now or dt_now_utc()
        window = self.coordinator.update_interval or timedelta(
            seconds=const.DEFAULT_CHECK_INTERVAL
        )
        nudge = ReminderEngine.check_habit_nudge(
            self.coordinator.habit_manager.list_habits(),
            now,
            self.context,
            window=window,
        )
        if nudge is None:
            return None

        const.LOGGER.info(
            "INFO: Sending habit nudge, %s habit(s) pending", nudge.pending_count
        )
        await self.coordinator.notification_manager.async_send(
            nudge.title, nudge.message
        )
        return nudge
