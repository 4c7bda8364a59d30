# File: __init__.py
"""Initialization file for the TaskQuest integration.

Handles setting up the integration, including loading configuration entries,
initializing data storage, and starting the coordinator poll loop that fires
reminders.

Key Features:
- Config entry setup, unload and removal support.
- Coordinator initialization for the reminder and habit checks.
- Storage management for persistent data handling.
"""

from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.util import dt as dt_util

from . import const
from .coordinator import TaskQuestDataCoordinator
from .services import async_setup_services, async_unload_services
from .storage_manager import TaskQuestStorageManager
from .utils import dt_utils


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up the integration from a config entry."""
    const.LOGGER.info("INFO: Starting setup for TaskQuest entry: %s", entry.entry_id)

    # Calendar-day math uses the Home Assistant configured timezone.
    # Must be done before any engine runs.
    tz = dt_util.get_time_zone(hass.config.time_zone)
    if tz is not None:
        dt_utils.set_default_timezone(tz)

    # Initialize the storage manager to handle persistent data.
    storage_manager = TaskQuestStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_initialize()

    # Create the data coordinator and wire manager events.
    coordinator = TaskQuestDataCoordinator(hass, entry, storage_manager)
    await coordinator.async_setup_managers()

    try:
        # Perform the first refresh (daily refresh plus a reminder check).
        await coordinator.async_config_entry_first_refresh()
    except ConfigEntryNotReady as e:
        const.LOGGER.error("ERROR: Failed to refresh coordinator data: %s", e)
        raise

    # Store the coordinator and data manager in hass.data.
    hass.data.setdefault(const.DOMAIN, {})[entry.entry_id] = {
        const.COORDINATOR: coordinator,
        const.STORAGE_MANAGER: storage_manager,
    }

    # Set up services required by the integration.
    async_setup_services(hass)

    await hass.config_entries.async_forward_entry_setups(entry, const.PLATFORMS)

    # Options changes (notify service, interval) take effect on reload.
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))

    const.LOGGER.info("INFO: TaskQuest setup complete for entry: %s", entry.entry_id)
    return True


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload the entry after its options changed."""
    const.LOGGER.debug("DEBUG: Reloading TaskQuest entry: %s", entry.entry_id)
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    const.LOGGER.info("INFO: Unloading TaskQuest entry: %s", entry.entry_id)

    unload_ok = await hass.config_entries.async_unload_platforms(entry, const.PLATFORMS)

    if unload_ok:
        entry_data = hass.data[const.DOMAIN].pop(entry.entry_id)
        # Flush anything scheduled by the last service call
        await entry_data[const.STORAGE_MANAGER].async_save()

        if not hass.data[const.DOMAIN]:
            await async_unload_services(hass)

    return unload_ok


async def async_remove_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle removal of a config entry."""
    const.LOGGER.info("INFO: Removing TaskQuest entry: %s", entry.entry_id)

    storage_manager = TaskQuestStorageManager(hass, const.STORAGE_KEY)
    await storage_manager.async_delete_storage()

    const.LOGGER.info("INFO: TaskQuest entry data cleared: %s", entry.entry_id)
