"""Type definitions for TaskQuest data structures.

HYBRID APPROACH (TypedDict + dict[str, Any])
============================================

1. **TypedDict for STATIC structures** (fixed keys known at design time):
   - Persisted entities: HabitData, ReminderData, ProfileData
   - Derived snapshots returned by services: LevelInfoData, YearlyStatsData

2. **dict[str, Any] for DYNAMIC structures** (keys determined at runtime):
   - Storage buckets keyed by entity id: habits[habit_id]

IMPORTANT: This file must NOT import from coordinator.py or any file that
imports coordinator to avoid circular dependencies.

NOTE: TypedDict is STATIC ANALYSIS ONLY. All runtime validation happens in the
engines (frequency parsing, interval parsing) and in the service schemas.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

HabitId = str  # UUID string
ReminderId = str  # UUID string
OwnerId = str
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"


# =============================================================================
# Habit Types
# =============================================================================


class CompletionData(TypedDict):
    """A single habit completion.

    Immutable once created. Only its calendar day matters; `completed_at`
    holds the ISO timestamp of local midnight for that day.
    """

    id: str
    owner_id: OwnerId
    completed_at: ISODatetime


class YearlyStatsData(TypedDict):
    """Achieved vs. expected occurrences within one calendar year."""

    achieved: int
    total_expected: int
    year: int


class HabitData(TypedDict):
    """Type definition for a habit entity.

    `current_streak`, `best_streak`, `xp`, `total_completions` and
    `yearly_stats` are derived from `completions` + the frequency policy and
    are rewritten together on every change.
    """

    id: HabitId
    owner_id: OwnerId
    title: str
    description: NotRequired[str]
    icon: str
    color: str
    frequency: str  # "daily" | "weekly" | "specific_days" | "every_<n>_days"
    custom_days: list[int]  # 0=Sunday .. 6=Saturday (specific_days only)
    created_at: ISODatetime
    completions: list[CompletionData]

    # Derived fields
    current_streak: int
    best_streak: int
    xp: int
    total_completions: int
    yearly_stats: YearlyStatsData


# =============================================================================
# Reminder Types
# =============================================================================


class ReminderData(TypedDict):
    """Type definition for a reminder entity.

    One-time reminders are deleted once fired. Ongoing reminders carry an
    interval and move `remind_at` forward on every firing.
    """

    id: ReminderId
    owner_id: OwnerId
    title: str
    description: NotRequired[str]
    icon: str
    type: str  # "one-time" | "ongoing"
    interval_unit: NotRequired[str | None]  # hours | days | weeks | months
    interval_value: NotRequired[int | None]
    remind_at: ISODatetime
    is_active: bool
    created_at: ISODatetime


# =============================================================================
# Progression Types
# =============================================================================


class ProfileData(TypedDict):
    """Persisted progression scalars.

    `total_xp` is a high-water mark: it only ever increases.
    """

    total_xp: int
    task_xp: int
    level: int


class LevelInfoData(TypedDict):
    """Derived level breakdown for a total XP value (never stored)."""

    level: int
    current_level_xp: int
    next_level_xp: int
    progress: float
    total_xp: int


# =============================================================================
# Collection Type Aliases
# =============================================================================

HabitsCollection = dict[HabitId, HabitData]
RemindersCollection = dict[ReminderId, ReminderData]
