"""Progression Engine - Pure logic for XP totals and levels.

This engine provides stateless, pure Python functions for:
- XP required per level (linear growth, flat above the cap level)
- Breaking a cumulative XP total into level / XP into level / progress
- XP earned by habits and tasks

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in ProgressionManager.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from .. import const
from .errors import InvalidXpError

if TYPE_CHECKING:
    from ..type_defs import LevelInfoData


@dataclass(frozen=True)
class LevelInfo:
    """Level breakdown for a cumulative XP total (derived, never stored).

    Attributes:
        level: Current level (starts at 1)
        current_level_xp: XP earned inside the current level
        next_level_xp: XP required to complete the current level
        progress: current_level_xp / next_level_xp as a percentage
        total_xp: The input total
    """

    level: int
    current_level_xp: int
    next_level_xp: int
    progress: float
    total_xp: int

    def as_dict(self) -> LevelInfoData:
        """Return the breakdown as a plain dict (service responses)."""
        return asdict(self)  # type: ignore[return-value]


class ProgressionEngine:
    """Pure logic engine for the progression model.

    required_xp(level) = BASE + (min(level, CAP_LEVEL) - 1) * INCREMENT

    All methods are static - no instance state.
    """

    @staticmethod
    def required_xp(level: int) -> int:
        """Return the XP needed to complete `level` (level >= 1).

        Examples:
            required_xp(1) → 100
            required_xp(2) → 120
            required_xp(100) == required_xp(500) → 2080
        """
        capped = min(max(level, 1), const.CAP_LEVEL)
        return const.BASE_XP_REQUIREMENT + (capped - 1) * const.XP_INCREMENT

    @staticmethod
    def level_info(total_xp: int) -> LevelInfo:
        """Break a cumulative XP total into level figures.

        Walks levels from 1 subtracting each level's requirement. Past
        CAP_LEVEL every level costs the same, so the rest is one division.

        Raises:
            InvalidXpError: If total_xp is negative or not a number.

        Examples:
            level_info(100) → level 2, current_level_xp 0
            level_info(219) → level 2, current_level_xp 119, progress ≈ 99.17
        """
        if (
            isinstance(total_xp, bool)
            or not isinstance(total_xp, (int, float))
            or total_xp < 0
        ):
            raise InvalidXpError(total_xp)

        total = int(total_xp)
        level = 1
        remaining = total

        while level < const.CAP_LEVEL and remaining >= ProgressionEngine.required_xp(
            level
        ):
            remaining -= ProgressionEngine.required_xp(level)
            level += 1

        if level >= const.CAP_LEVEL:
            flat_cost = ProgressionEngine.required_xp(const.CAP_LEVEL)
            skipped, remaining = divmod(remaining, flat_cost)
            level += skipped

        next_level_xp = ProgressionEngine.required_xp(level)
        return LevelInfo(
            level=level,
            current_level_xp=remaining,
            next_level_xp=next_level_xp,
            progress=remaining / next_level_xp * 100,
            total_xp=total,
        )

    @staticmethod
    def habit_xp(completion_days: int, bonus_xp: int) -> int:
        """Return the XP a habit is worth: 15 per completion day plus streak bonus."""
        return completion_days * const.XP_PER_COMPLETION + bonus_xp

    @staticmethod
    def task_xp(completed_tasks: int) -> int:
        """Return the XP for a number of completed tasks (10 each)."""
        return completed_tasks * const.XP_PER_TASK

    @staticmethod
    def merge_total_xp(previous_total: int, task_xp: int, habit_xp: list[int]) -> int:
        """Return the new persisted total as a high-water mark.

        The total is the sum of task XP and every habit's XP, but it never drops
        below the previously persisted total, so removing a completion cannot
        lower a level.
        """
        return max(previous_total or 0, task_xp + sum(habit_xp))


def level_info(total_xp: int) -> LevelInfo:
    """Return the level breakdown (see ProgressionEngine.level_info)."""
    return ProgressionEngine.level_info(total_xp)
