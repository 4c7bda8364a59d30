# File: config_flow.py
"""Config flow for the TaskQuest integration.

A single instance is allowed. The flow only collects system settings (notify
service and poll interval); habits and reminders live in storage and are
managed through services.
"""

from typing import Any, Optional

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import config_validation as cv

from . import const


def build_settings_schema(defaults: dict[str, Any]) -> vol.Schema:
    """Schema shared by the config and options steps."""
    return vol.Schema(
        {
            vol.Required(
                const.CONF_NOTIFY_SERVICE,
                default=defaults.get(
                    const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
                ),
            ): cv.string,
            vol.Required(
                const.CONF_CHECK_INTERVAL,
                default=defaults.get(
                    const.CONF_CHECK_INTERVAL, const.DEFAULT_CHECK_INTERVAL
                ),
            ): vol.All(
                vol.Coerce(int),
                vol.Range(min=const.MIN_CHECK_INTERVAL, max=const.MAX_CHECK_INTERVAL),
            ),
        }
    )


class TaskQuestConfigFlow(config_entries.ConfigFlow, domain=const.DOMAIN):
    """Config Flow for TaskQuest."""

    VERSION = 1

    async def async_step_user(self, user_input: Optional[dict[str, Any]] = None):
        """Collect the system settings and create the entry."""

        # Check if there's an existing TaskQuest entry
        if any(self._async_current_entries()):
            return self.async_abort(reason=const.TRANS_KEY_ERROR_SINGLE_INSTANCE)

        if user_input is not None:
            const.LOGGER.debug("DEBUG: Creating TaskQuest entry with %s", user_input)
            return self.async_create_entry(
                title=const.TASKQUEST_TITLE, data={}, options=dict(user_input)
            )

        return self.async_show_form(
            step_id="user", data_schema=build_settings_schema({})
        )

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Return the Options Flow."""
        return TaskQuestOptionsFlowHandler()


class TaskQuestOptionsFlowHandler(config_entries.OptionsFlow):
    """Edit notify service and poll interval; the entry reloads on save."""

    async def async_step_init(self, user_input: Optional[dict[str, Any]] = None):
        """Show or apply the settings form."""
        if user_input is not None:
            const.LOGGER.debug("DEBUG: Updating TaskQuest options to %s", user_input)
            return self.async_create_entry(title="", data=dict(user_input))

        return self.async_show_form(
            step_id="init",
            data_schema=build_settings_schema(dict(self.config_entry.options)),
        )
