# File: services.py
"""Defines custom services for the TaskQuest integration.

These services are the only write path into habits, reminders and the
progression profile; they can be called from scripts, automations or a
dashboard.
"""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant.core import HomeAssistant, ServiceCall, SupportsResponse
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv

from . import const
from . import tq_helpers as th
from .data_builders import EntityValidationError
from .engines.errors import TaskQuestEngineError

# --- Service Schemas ---
_FREQUENCY_FIELDS = {
    vol.Optional(const.FIELD_FREQUENCY): cv.string,
    vol.Optional(const.FIELD_CUSTOM_DAYS): vol.All(
        cv.ensure_list, [vol.All(vol.Coerce(int), vol.Range(min=0, max=6))]
    ),
}

ADD_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_OWNER_ID): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_ICON): cv.string,
        vol.Optional(const.FIELD_COLOR): cv.string,
        **_FREQUENCY_FIELDS,
    }
)

UPDATE_HABIT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_TITLE): cv.string,
        vol.Optional(const.FIELD_OWNER_ID): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_ICON): cv.string,
        vol.Optional(const.FIELD_COLOR): cv.string,
        **_FREQUENCY_FIELDS,
    }
)

HABIT_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_HABIT_ID): cv.string})

TOGGLE_HABIT_COMPLETION_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_HABIT_ID): cv.string,
        vol.Optional(const.FIELD_DATE): cv.date,
    }
)

ADD_REMINDER_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_TITLE): cv.string,
        vol.Required(const.FIELD_REMIND_AT): cv.string,
        vol.Optional(const.FIELD_TYPE, default=const.REMINDER_TYPE_ONE_TIME): vol.In(
            const.REMINDER_TYPES
        ),
        vol.Optional(const.FIELD_INTERVAL_UNIT): vol.In(const.REMINDER_INTERVAL_UNITS),
        vol.Optional(const.FIELD_INTERVAL_VALUE): vol.Coerce(int),
        vol.Optional(const.FIELD_OWNER_ID): cv.string,
        vol.Optional(const.FIELD_DESCRIPTION): cv.string,
        vol.Optional(const.FIELD_ICON): cv.string,
        vol.Optional(const.FIELD_IS_ACTIVE, default=True): cv.boolean,
    }
)

REMINDER_ID_SCHEMA = vol.Schema({vol.Required(const.FIELD_REMINDER_ID): cv.string})

SET_REMINDER_ACTIVE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_REMINDER_ID): cv.string,
        vol.Required(const.FIELD_IS_ACTIVE): cv.boolean,
    }
)

RECORD_TASK_COMPLETION_SCHEMA = vol.Schema(
    {vol.Optional(const.FIELD_COUNT, default=1): vol.All(vol.Coerce(int), vol.Range(min=1))}
)

GET_LEVEL_INFO_SCHEMA = vol.Schema({})

SERVICES = [
    const.SERVICE_ADD_HABIT,
    const.SERVICE_UPDATE_HABIT,
    const.SERVICE_DELETE_HABIT,
    const.SERVICE_TOGGLE_HABIT_COMPLETION,
    const.SERVICE_GET_HABIT,
    const.SERVICE_ADD_REMINDER,
    const.SERVICE_DELETE_REMINDER,
    const.SERVICE_SET_REMINDER_ACTIVE,
    const.SERVICE_RECORD_TASK_COMPLETION,
    const.SERVICE_GET_LEVEL_INFO,
]


def _validation_error(service: str, err: Exception) -> HomeAssistantError:
    """Log a rejected service call and build the error surfaced to the caller."""
    const.LOGGER.warning("WARNING: %s: %s", service, err)
    return HomeAssistantError(f"{service}: {err}")


def async_setup_services(hass: HomeAssistant) -> None:
    """Register TaskQuest services."""

    # -- Habits ---------------------------------------------------------------

    async def handle_add_habit(call: ServiceCall) -> None:
        """Handle creating a habit."""
        coordinator = th.get_coordinator(hass)
        try:
            habit = coordinator.habit_manager.add_habit(dict(call.data))
        except (EntityValidationError, TaskQuestEngineError) as err:
            raise _validation_error(const.SERVICE_ADD_HABIT, err) from err

        const.LOGGER.info(
            "INFO: Habit '%s' created with id %s",
            habit[const.DATA_TITLE],
            habit[const.DATA_ID],
        )
        await coordinator.async_request_refresh()

    async def handle_update_habit(call: ServiceCall) -> None:
        """Handle editing a habit."""
        coordinator = th.get_coordinator(hass)
        data = dict(call.data)
        habit_id = data.pop(const.FIELD_HABIT_ID)
        try:
            coordinator.habit_manager.update_habit(habit_id, data)
        except (EntityValidationError, TaskQuestEngineError) as err:
            raise _validation_error(const.SERVICE_UPDATE_HABIT, err) from err
        await coordinator.async_request_refresh()

    async def handle_delete_habit(call: ServiceCall) -> None:
        """Handle deleting a habit."""
        coordinator = th.get_coordinator(hass)
        coordinator.habit_manager.delete_habit(call.data[const.FIELD_HABIT_ID])
        await coordinator.async_request_refresh()

    async def handle_toggle_habit_completion(call: ServiceCall) -> None:
        """Handle toggling a day's completion (today when no date is given)."""
        coordinator = th.get_coordinator(hass)
        habit_id = call.data[const.FIELD_HABIT_ID]
        try:
            coordinator.habit_manager.toggle_completion(
                habit_id, call.data.get(const.FIELD_DATE)
            )
        except TaskQuestEngineError as err:
            raise _validation_error(const.SERVICE_TOGGLE_HABIT_COMPLETION, err) from err
        await coordinator.async_request_refresh()

    async def handle_get_habit(call: ServiceCall) -> dict[str, Any]:
        """Return a habit snapshot."""
        coordinator = th.get_coordinator(hass)
        return dict(coordinator.habit_manager.get_habit(call.data[const.FIELD_HABIT_ID]))

    # -- Reminders ------------------------------------------------------------

    async def handle_add_reminder(call: ServiceCall) -> None:
        """Handle creating a reminder."""
        coordinator = th.get_coordinator(hass)
        try:
            coordinator.reminder_manager.add_reminder(dict(call.data))
        except (EntityValidationError, TaskQuestEngineError) as err:
            raise _validation_error(const.SERVICE_ADD_REMINDER, err) from err
        await coordinator.async_request_refresh()

    async def handle_delete_reminder(call: ServiceCall) -> None:
        """Handle deleting a reminder."""
        coordinator = th.get_coordinator(hass)
        coordinator.reminder_manager.delete_reminder(
            call.data[const.FIELD_REMINDER_ID]
        )
        await coordinator.async_request_refresh()

    async def handle_set_reminder_active(call: ServiceCall) -> None:
        """Handle (de)activating a reminder."""
        coordinator = th.get_coordinator(hass)
        coordinator.reminder_manager.set_active(
            call.data[const.FIELD_REMINDER_ID], call.data[const.FIELD_IS_ACTIVE]
        )
        await coordinator.async_request_refresh()

    # -- Progression ----------------------------------------------------------

    async def handle_record_task_completion(call: ServiceCall) -> None:
        """Handle crediting XP for completed tasks."""
        coordinator = th.get_coordinator(hass)
        coordinator.progression_manager.record_task_completion(
            call.data[const.FIELD_COUNT]
        )
        await coordinator.async_request_refresh()

    async def handle_get_level_info(call: ServiceCall) -> dict[str, Any]:
        """Return the current level breakdown."""
        coordinator = th.get_coordinator(hass)
        return dict(coordinator.progression_manager.get_level_info().as_dict())

    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_HABIT,
        handle_add_habit,
        schema=ADD_HABIT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_UPDATE_HABIT,
        handle_update_habit,
        schema=UPDATE_HABIT_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_HABIT,
        handle_delete_habit,
        schema=HABIT_ID_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_TOGGLE_HABIT_COMPLETION,
        handle_toggle_habit_completion,
        schema=TOGGLE_HABIT_COMPLETION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_HABIT,
        handle_get_habit,
        schema=HABIT_ID_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_ADD_REMINDER,
        handle_add_reminder,
        schema=ADD_REMINDER_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_DELETE_REMINDER,
        handle_delete_reminder,
        schema=REMINDER_ID_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_SET_REMINDER_ACTIVE,
        handle_set_reminder_active,
        schema=SET_REMINDER_ACTIVE_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_RECORD_TASK_COMPLETION,
        handle_record_task_completion,
        schema=RECORD_TASK_COMPLETION_SCHEMA,
    )
    hass.services.async_register(
        const.DOMAIN,
        const.SERVICE_GET_LEVEL_INFO,
        handle_get_level_info,
        schema=GET_LEVEL_INFO_SCHEMA,
        supports_response=SupportsResponse.ONLY,
    )

    const.LOGGER.info("INFO: TaskQuest services have been registered successfully")


async def async_unload_services(hass: HomeAssistant) -> None:
    """Unregister TaskQuest services when unloading the integration."""
    for service in SERVICES:
        if hass.services.has_service(const.DOMAIN, service):
            hass.services.async_remove(const.DOMAIN, service)

    const.LOGGER.info("INFO: TaskQuest services have been unregistered")
