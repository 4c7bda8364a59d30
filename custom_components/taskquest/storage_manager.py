# File: storage_manager.py
"""Handles persistent data storage for the TaskQuest integration.

Uses Home Assistant's Storage helper to save and load habits, reminders and the
progression profile, ensuring the state is preserved across restarts.
"""

from __future__ import annotations

import copy
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.helpers.storage import Store

from . import const
from .utils.dt_utils import dt_now_utc


class TaskQuestStorageManager:
    """Manages loading, saving, and accessing data from Home Assistant's storage.

    Entities are kept per bucket (habits, reminders) keyed by their id. Every
    bucket exposes the same get / list / put / delete operations.
    """

    def __init__(
        self, hass: HomeAssistant, storage_key: str = const.STORAGE_KEY
    ) -> None:
        """Initialize the storage manager.

        Args:
            hass: Home Assistant core object.
            storage_key: Key to identify storage location (default: const.STORAGE_KEY).
        """
        self.hass = hass
        self._storage_key = storage_key
        self._store: Store = Store(hass, const.STORAGE_VERSION, storage_key)
        self._data: dict[str, Any] = {}  # In-memory data cache for quick access.

    def _get_default_structure(self) -> dict[str, Any]:
        """Get the default empty data structure."""
        return {
            const.DATA_META: {
                const.DATA_META_SCHEMA_VERSION: const.SCHEMA_VERSION,
                const.DATA_META_CREATED_AT: dt_now_utc().isoformat(),
            },
            const.DATA_HABITS: {},
            const.DATA_REMINDERS: {},
            const.DATA_PROFILE: {
                const.DATA_PROFILE_TOTAL_XP: const.DEFAULT_ZERO,
                const.DATA_PROFILE_TASK_XP: const.DEFAULT_ZERO,
                const.DATA_PROFILE_LEVEL: 1,
            },
        }

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, initializes with an empty structure. Missing buckets
        in older files are filled with their defaults.
        """
        const.LOGGER.debug("DEBUG: TaskQuestStorageManager: Loading data from storage")
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing storage found. Initializing new data")
            self._data = self._get_default_structure()
            return

        self._data = existing_data
        for key, default in self._get_default_structure().items():
            self._data.setdefault(key, default)

        const.LOGGER.debug(
            "DEBUG: Loaded existing data from storage: %s entities",
            {
                "habits": len(self._data[const.DATA_HABITS]),
                "reminders": len(self._data[const.DATA_REMINDERS]),
            },
        )

    @property
    def data(self) -> dict[str, Any]:
        """Retrieve the in-memory data cache."""
        return self._data

    # -------------------------------------------------------------------------------------
    # Buckets
    # -------------------------------------------------------------------------------------

    def get_habits(self) -> dict[str, Any]:
        """Retrieve the habits bucket."""
        return self._data.setdefault(const.DATA_HABITS, {})

    def get_reminders(self) -> dict[str, Any]:
        """Retrieve the reminders bucket."""
        return self._data.setdefault(const.DATA_REMINDERS, {})

    def get_profile(self) -> dict[str, Any]:
        """Retrieve the progression profile."""
        return self._data.setdefault(
            const.DATA_PROFILE,
            copy.deepcopy(self._get_default_structure()[const.DATA_PROFILE]),
        )

    def _bucket(self, bucket: str) -> dict[str, Any]:
        if bucket not in (const.DATA_HABITS, const.DATA_REMINDERS):
            raise KeyError(f"Unknown storage bucket '{bucket}'")
        return self._data.setdefault(bucket, {})

    def get(self, bucket: str, entity_id: str) -> dict[str, Any] | None:
        """Return one entity by id, or None if it does not exist."""
        return self._bucket(bucket).get(entity_id)

    def list(self, bucket: str, owner_id: str | None = None) -> list[dict[str, Any]]:
        """Return every entity in a bucket, optionally filtered by owner."""
        entities = list(self._bucket(bucket).values())
        if owner_id is None:
            return entities
        return [e for e in entities if e.get(const.DATA_OWNER_ID) == owner_id]

    def put(self, bucket: str, entity: dict[str, Any]) -> None:
        """Insert or replace an entity (keyed by its id)."""
        self._bucket(bucket)[entity[const.DATA_ID]] = entity

    def delete(self, bucket: str, entity_id: str) -> bool:
        """Remove an entity. Returns False if it did not exist."""
        return self._bucket(bucket).pop(entity_id, None) is not None

    # -------------------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------------------

    async def async_save(self) -> None:
        """Save the current data structure to storage asynchronously.

        Errors are logged but do not stop execution.
        """
        try:
            await self._store.async_save(self._data)
            const.LOGGER.debug("DEBUG: Data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save storage due to non-serializable data: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = self._get_default_structure()
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )
