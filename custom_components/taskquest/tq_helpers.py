# File: tq_helpers.py
"""TaskQuest helper functions shared by services and managers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from homeassistant.exceptions import HomeAssistantError

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .coordinator import TaskQuestDataCoordinator


def get_first_taskquest_entry(hass: HomeAssistant) -> Optional[str]:
    """Retrieve the first TaskQuest config entry ID."""
    domain_entries = hass.data.get(const.DOMAIN)
    if not domain_entries:
        return None
    return next(iter(domain_entries.keys()), None)


def get_coordinator(hass: HomeAssistant) -> TaskQuestDataCoordinator:
    """Return the coordinator of the loaded TaskQuest entry.

    Raises:
        HomeAssistantError: If no entry is loaded.
    """
    entry_id = get_first_taskquest_entry(hass)
    if not entry_id:
        raise HomeAssistantError(const.MSG_NO_ENTRY_FOUND)
    return hass.data[const.DOMAIN][entry_id][const.COORDINATOR]


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build instance-scoped event signal name for dispatcher.

    Format: 'taskquest_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_HABIT_UPDATED)
        'taskquest_abc123_habit_updated'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"
