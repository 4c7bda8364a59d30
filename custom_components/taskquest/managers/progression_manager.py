"""Progression Manager - Persisted XP total and level.

This manager owns the profile bucket:
- task_xp accumulates 10 XP per recorded task completion
- total_xp = max(previous total_xp, task_xp + sum of habit XP)
- level is refreshed from total_xp; a level increase emits LEVEL_UP

ARCHITECTURE:
- ProgressionManager = STATEFUL profile updates (storage + events)
- ProgressionEngine = Pure XP/level math (STATELESS)
- Listens to HABIT_UPDATED so habit toggles flow into the total
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.core import callback

from .. import const
from ..engines.progression_engine import LevelInfo, ProgressionEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import TaskQuestDataCoordinator


class ProgressionManager(BaseManager):
    """Manager for the XP total and level.

    Responsibilities:
    - Keep profile.total_xp as a high-water mark
    - Record task completions
    - Emit SIGNAL_SUFFIX_LEVEL_UP when the level rises
    """

    def __init__(
        self, hass: HomeAssistant, coordinator: TaskQuestDataCoordinator
    ) -> None:
        """Initialize the ProgressionManager."""
        super().__init__(hass, coordinator)

    async def async_setup(self) -> None:
        """Subscribe to habit changes and bring the profile up to date."""
        self.listen(const.SIGNAL_SUFFIX_HABIT_UPDATED, self._handle_habit_updated)
        self.recalculate()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def profile(self) -> dict[str, Any]:
        """The persisted profile bucket."""
        return self.storage.get_profile()

    def get_level_info(self) -> LevelInfo:
        """Return the level breakdown of the persisted total."""
        return ProgressionEngine.level_info(
            self.profile.get(const.DATA_PROFILE_TOTAL_XP, const.DEFAULT_ZERO)
        )

    # =========================================================================
    # Updates
    # =========================================================================

    def record_task_completion(self, count: int = 1) -> LevelInfo:
        """Add XP for `count` completed tasks and refresh the total."""
        gained = ProgressionEngine.task_xp(count)
        profile = self.profile
        profile[const.DATA_PROFILE_TASK_XP] = (
            profile.get(const.DATA_PROFILE_TASK_XP, const.DEFAULT_ZERO) + gained
        )
        const.LOGGER.info(
            "INFO: Recorded %s task completion(s), +%s XP (task_xp=%s)",
            count,
            gained,
            profile[const.DATA_PROFILE_TASK_XP],
        )
        self.emit(const.SIGNAL_SUFFIX_TASK_COMPLETED, count=count, xp=gained)
        return self.recalculate()

    def recalculate(self) -> LevelInfo:
        """Merge task and habit XP into the persisted total and refresh the level.

        Habits with a non-numeric xp field are skipped with a warning.
        """
        profile = self.profile
        habit_xp: list[int] = []
        for habit in self.storage.list(const.DATA_HABITS):
            xp = habit.get(const.DATA_HABIT_XP, const.DEFAULT_ZERO)
            if isinstance(xp, bool) or not isinstance(xp, (int, float)):
                const.LOGGER.warning(
                    "WARNING: Habit '%s' has invalid xp %r, ignoring",
                    habit.get(const.DATA_ID),
                    xp,
                )
                continue
            habit_xp.append(int(xp))

        old_total = profile.get(const.DATA_PROFILE_TOTAL_XP, const.DEFAULT_ZERO)
        old_level = profile.get(const.DATA_PROFILE_LEVEL, 1)
        new_total = ProgressionEngine.merge_total_xp(
            old_total,
            profile.get(const.DATA_PROFILE_TASK_XP, const.DEFAULT_ZERO),
            habit_xp,
        )
        info = ProgressionEngine.level_info(new_total)

        if new_total == old_total and info.level == old_level:
            return info

        profile[const.DATA_PROFILE_TOTAL_XP] = new_total
        profile[const.DATA_PROFILE_LEVEL] = info.level
        self.coordinator._persist()  # pylint: disable=protected-access

        const.LOGGER.debug(
            "DEBUG: Total XP %s -> %s, level %s -> %s",
            old_total,
            new_total,
            old_level,
            info.level,
        )
        if info.level > old_level:
            const.LOGGER.info("INFO: Level up! %s -> %s", old_level, info.level)
            self.emit(
                const.SIGNAL_SUFFIX_LEVEL_UP,
                old_level=old_level,
                new_level=info.level,
            )
        return info

    # =========================================================================
    # Event Handlers
    # =========================================================================

    @callback
    def _handle_habit_updated(self, payload: dict[str, Any]) -> None:
        """Handle HABIT_UPDATED event - refresh the total."""
        const.LOGGER.debug(
            "DEBUG: Habit '%s' changed, recalculating progression",
            payload.get("habit_id"),
        )
        self.recalculate()
