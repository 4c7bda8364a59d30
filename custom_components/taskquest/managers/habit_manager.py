"""Habit Manager - Habit CRUD and completion toggling.

This manager handles all habit-related operations:
- Create / update / delete habits
- Toggle a day's completion (HabitEngine does the math)
- Daily refresh of derived fields so lapsed streaks drop to zero
- Event emission for habit changes

ARCHITECTURE:
- HabitManager = STATEFUL habit operations (storage + events)
- HabitEngine = Pure ledger and snapshot logic (STATELESS)
- ProgressionManager listens to HABIT_UPDATED events to refresh total XP
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from homeassistant.exceptions import HomeAssistantError

from .. import const, data_builders as db
from ..engines.habit_engine import HabitEngine
from ..utils.dt_utils import dt_today_local, to_calendar_day
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import TaskQuestDataCoordinator
    from ..type_defs import HabitData


class HabitManager(BaseManager):
    """Manager for habits and their completion ledgers.

    Responsibilities:
    - Persist habit changes through the storage manager
    - Keep derived fields in step with completions and the calendar
    - Emit SIGNAL_SUFFIX_HABIT_UPDATED events
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: TaskQuestDataCoordinator
    ) -> None:
        """Initialize the HabitManager."""
        super().__init__(hass, coordinator)
        self._last_refresh_day: date | None = None

    async def async_setup(self) -> None:
        """Nothing to subscribe to; habits only change through services."""

    # =========================================================================
    # Queries
    # =========================================================================

    def list_habits(self, owner_id: str | None = None) -> list[HabitData]:
        """Return every habit, optionally for one owner."""
        return self.storage.list(const.DATA_HABITS, owner_id)  # type: ignore[return-value]

    def get_habit(self, habit_id: str) -> HabitData:
        """Return a habit by id.

        Raises:
            HomeAssistantError: If the habit does not exist.
        """
        habit = self.storage.get(const.DATA_HABITS, habit_id)
        if habit is None:
            raise HomeAssistantError(const.ERROR_HABIT_NOT_FOUND_FMT.format(habit_id))
        return habit  # type: ignore[return-value]

    # =========================================================================
    # CRUD
    # =========================================================================

    def add_habit(
        self,
        user_input: dict[str, Any],
        reference: date | datetime | None = None,
    ) -> HabitData:
        """Create and store a new habit.

        Raises:
            EntityValidationError / InvalidPolicyError: Bad input.
        """
        habit = db.build_habit(user_input, reference=reference)
        self.storage.put(const.DATA_HABITS, habit)
        const.LOGGER.info(
            "INFO: Added habit '%s' (%s, %s)",
            habit[const.DATA_TITLE],
            habit[const.DATA_ID],
            habit[const.DATA_HABIT_FREQUENCY],
        )
        self._changed(habit)
        return habit

    def update_habit(
        self,
        habit_id: str,
        user_input: dict[str, Any],
        reference: date | datetime | None = None,
    ) -> HabitData:
        """Apply edits to a habit and recompute its derived fields.

        Raises:
            HomeAssistantError: Unknown habit.
            EntityValidationError / InvalidPolicyError: Bad input.
        """
        existing = self.get_habit(habit_id)
        habit = db.build_habit(user_input, existing=existing, reference=reference)
        self.storage.put(const.DATA_HABITS, habit)
        const.LOGGER.info("INFO: Updated habit '%s'", habit_id)
        self._changed(habit)
        return habit

    def delete_habit(self, habit_id: str) -> None:
        """Delete a habit.

        Raises:
            HomeAssistantError: Unknown habit.
        """
        if not self.storage.delete(const.DATA_HABITS, habit_id):
            raise HomeAssistantError(const.ERROR_HABIT_NOT_FOUND_FMT.format(habit_id))
        const.LOGGER.info("INFO: Deleted habit '%s'", habit_id)
        self.coordinator._persist()  # pylint: disable=protected-access
        self.emit(const.SIGNAL_SUFFIX_HABIT_UPDATED, habit_id=habit_id, deleted=True)

    def toggle_completion(
        self,
        habit_id: str,
        day: date | datetime | None = None,
        reference: date | datetime | None = None,
    ) -> HabitData:
        """Toggle the completion of `day` (today when omitted).

        Raises:
            HomeAssistantError: Unknown habit.
            InvalidPolicyError: The stored frequency is malformed.
        """
        habit = self.get_habit(habit_id)
        toggle_day = day if day is not None else dt_today_local()
        updated = HabitEngine.toggle_completion(habit, toggle_day, reference)
        self.storage.put(const.DATA_HABITS, updated)
        const.LOGGER.debug(
            "DEBUG: Toggled habit '%s' on %s: %s completions, streak %s/%s, xp %s",
            habit_id,
            toggle_day,
            updated[const.DATA_HABIT_TOTAL_COMPLETIONS],
            updated[const.DATA_HABIT_CURRENT_STREAK],
            updated[const.DATA_HABIT_BEST_STREAK],
            updated[const.DATA_HABIT_XP],
        )
        self._changed(updated)
        return updated

    # =========================================================================
    # Periodic refresh
    # =========================================================================

    def refresh_derived(self, reference: date | datetime | None = None) -> int:
        """Recompute every habit's derived fields once per local day.

        Streaks lapse and yearly stats roll over with the calendar, not with
        completions. A habit that cannot be recomputed is logged and skipped.

        Returns:
            Number of habits whose snapshot changed.
        """
        today_day = (
            to_calendar_day(reference) if reference is not None else dt_today_local()
        )
        if self._last_refresh_day == today_day:
            return 0

        changed = 0
        for habit in self.list_habits():
            try:
                updated = HabitEngine.recompute(habit, today_day)
            except ValueError as err:
                const.LOGGER.warning(
                    "WARNING: Skipping refresh of habit '%s': %s",
                    habit.get(const.DATA_ID),
                    err,
                )
                continue
            if updated != habit:
                self.storage.put(const.DATA_HABITS, updated)
                changed += 1

        self._last_refresh_day = today_day
        if changed:
            const.LOGGER.debug("DEBUG: Refreshed %s habit snapshots", changed)
            self.coordinator._persist()  # pylint: disable=protected-access
        return changed

    def _changed(self, habit: HabitData) -> None:
        self.coordinator._persist()  # pylint: disable=protected-access
        self.emit(
            const.SIGNAL_SUFFIX_HABIT_UPDATED,
            habit_id=habit[const.DATA_ID],
            xp=habit[const.DATA_HABIT_XP],
        )
