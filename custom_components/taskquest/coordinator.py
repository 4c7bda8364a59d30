# File: coordinator.py
"""Coordinator for the TaskQuest integration.

Runs the poll checks: on each refresh (every `check_interval` seconds) it
refreshes derived habit fields on a new local day, fires due reminders and
sends the evening habit nudge. Entity changes go through the managers it
creates.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import const
from .managers import (
    HabitManager,
    NotificationManager,
    ProgressionManager,
    ReminderManager,
)
from .storage_manager import TaskQuestStorageManager
from .utils.dt_utils import dt_now_utc


class TaskQuestDataCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Coordinator for TaskQuest integration.

    The storage manager's in-memory dict is the coordinator data.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        storage_manager: TaskQuestStorageManager,
    ) -> None:
        """Initialize the TaskQuestDataCoordinator."""
        check_interval_seconds = config_entry.options.get(
            const.CONF_CHECK_INTERVAL, const.DEFAULT_CHECK_INTERVAL
        )

        super().__init__(
            hass,
            const.LOGGER,
            config_entry=config_entry,
            name=f"{const.DOMAIN}{const.COORDINATOR_SUFFIX}",
            update_interval=timedelta(seconds=check_interval_seconds),
        )
        self.config_entry = config_entry
        self.storage_manager = storage_manager

        self.notification_manager = NotificationManager(hass, self)
        self.habit_manager = HabitManager(hass, self)
        self.reminder_manager = ReminderManager(hass, self)
        self.progression_manager = ProgressionManager(hass, self)

    async def async_setup_managers(self) -> None:
        """Set up managers (event subscriptions) in dependency order."""
        await self.notification_manager.async_setup()
        await self.habit_manager.async_setup()
        await self.reminder_manager.async_setup()
        await self.progression_manager.async_setup()

    # -------------------------------------------------------------------------------------
    # Data accessors
    # -------------------------------------------------------------------------------------

    @property
    def habits_data(self) -> dict[str, Any]:
        """Habits keyed by id."""
        return self.storage_manager.get_habits()

    @property
    def reminders_data(self) -> dict[str, Any]:
        """Reminders keyed by id."""
        return self.storage_manager.get_reminders()

    @property
    def profile_data(self) -> dict[str, Any]:
        """Progression profile."""
        return self.storage_manager.get_profile()

    # -------------------------------------------------------------------------------------
    # Poll loop
    # -------------------------------------------------------------------------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Periodic update."""
        try:
            await self.async_run_checks(dt_now_utc())
        except Exception as err:  # pylint: disable=broad-exception-caught
            raise UpdateFailed(f"Error updating TaskQuest data: {err}") from err
        return self.storage_manager.data

    async def async_run_checks(self, now: datetime) -> None:
        """Run one poll tick against an explicit `now`.

        Each step isolates failures per entity, so one malformed record never
        blocks the others.
        """
        if self.habit_manager.refresh_derived(now):
            self.progression_manager.recalculate()
        await self.reminder_manager.async_check_reminders(now)
        await self.reminder_manager.async_check_habit_nudge(now)

    def _persist(self) -> None:
        """Schedule a save of the current data."""
        self.hass.async_create_task(self.storage_manager.async_save())
