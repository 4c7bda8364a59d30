# File: notification_manager.py
"""Notification Manager for TaskQuest integration.

This manager handles all outgoing notification logic:
- Sending reminder and habit-nudge notifications through the configured
  notify service
- Event-driven notifications (listens to level-up events)

Delivery is best effort: a missing notify service or a failing call is logged
and swallowed, the engines never see it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import TaskQuestDataCoordinator


# =============================================================================
# Module-level helper for testability
# =============================================================================


async def async_send_notification(
    hass: HomeAssistant,
    service: str,
    title: str,
    message: str,
) -> None:
    """Send a notification via Home Assistant service call.

    This is a module-level function that can be easily mocked in tests.

    Args:
        hass: Home Assistant instance
        service: Notification service in format "notify.service_name" or just service name
        title: Notification title
        message: Notification message
    """
    if const.DISPLAY_DOT in service:
        domain, svc = service.split(".", 1)
    else:
        domain = const.NOTIFY_DOMAIN
        svc = service

    payload: dict[str, Any] = {
        const.NOTIFY_TITLE: title,
        const.NOTIFY_MESSAGE: message,
    }

    const.LOGGER.debug(
        "async_send_notification: %s.%s - title='%s', message='%s'",
        domain,
        svc,
        title,
        message,
    )

    await hass.services.async_call(domain, svc, payload, blocking=True)


class NotificationManager(BaseManager):
    """Manager for sending TaskQuest notifications.

    Responsibilities:
    - Resolve the notify service from the config entry options
    - Send notifications without ever raising to the caller
    - React to level-up events
    """

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(
        self, hass: HomeAssistant, coordinator: TaskQuestDataCoordinator
    ) -> None:
        """Initialize notification manager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Subscribe to events that produce notifications."""
        self.listen(const.SIGNAL_SUFFIX_LEVEL_UP, self._handle_level_up)

    @property
    def notify_service(self) -> str:
        """The configured notify service ("notify.<name>")."""
        return self.coordinator.config_entry.options.get(
            const.CONF_NOTIFY_SERVICE, const.DEFAULT_NOTIFY_SERVICE
        )

    # =========================================================================
    # Sending
    # =========================================================================

    async def async_send(
        self,
        title: str,
        message: str,
    ) -> bool:
        """Send a notification using the configured notify service.

        Gracefully handles missing notification services (common in fresh
        installs or when the mobile app isn't configured yet).

        Returns:
            True if the notify service was called successfully.
        """
        notify_service = self.notify_service
        if const.DISPLAY_DOT not in notify_service:
            domain = const.NOTIFY_DOMAIN
            service = notify_service
        else:
            domain, service = notify_service.split(".", 1)

        if not self.hass.services.has_service(domain, service):
            const.LOGGER.warning(
                "Notification service '%s.%s' not available - skipping notification. "
                "Configure the '%s' integration to enable notifications",
                domain,
                service,
                domain,
            )
            return False

        try:
            await async_send_notification(
                self.hass, notify_service, title, message
            )
        except Exception as err:  # pylint: disable=broad-exception-caught
            # Logged and never re-raised
            const.LOGGER.error(
                "ERROR: Unexpected error sending notification via '%s.%s': %s",
                domain,
                service,
                err,
            )
            return False

        const.LOGGER.debug("DEBUG: Notification sent via '%s.%s'", domain, service)
        return True

    # =========================================================================
    # Event Handlers
    # =========================================================================

    @callback
    def _handle_level_up(self, payload: dict[str, Any]) -> None:
        """Handle LEVEL_UP event - congratulate the user.

        Args:
            payload: Event data containing old_level and new_level
        """
        new_level = payload.get("new_level")
        if new_level is None:
            return

        self.hass.async_create_task(
            self.async_send(
                const.NOTIFY_LEVEL_UP_TITLE,
                const.NOTIFY_LEVEL_UP_MESSAGE_FMT.format(new_level),
            )
        )
