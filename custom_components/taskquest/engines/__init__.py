"""Engine modules for TaskQuest integration.

Contains pure computation engines (no Home Assistant imports):
- frequency_engine: Frequency policies and the "is scheduled" predicate
- streak_engine: Current/best streak and streak bonus XP
- progression_engine: XP → level breakdown
- statistics_engine: Yearly achieved vs. expected occurrences
- habit_engine: Completion ledger toggle and derived snapshot
- reminder_engine: Reminder firing, rescheduling and dedupe
"""

# Use relative imports within package to avoid mypy module resolution issues
from .errors import (
    InvalidPolicyError,
    InvalidScheduleSpecError,
    InvalidXpError,
    TaskQuestEngineError,
)
from .frequency_engine import (
    Daily,
    EveryNDays,
    FrequencyEngine,
    FrequencyPolicy,
    SpecificDays,
    Weekly,
)
from .habit_engine import HabitEngine
from .progression_engine import LevelInfo, ProgressionEngine
from .reminder_engine import (
    HabitNudge,
    ReminderCheckContext,
    ReminderEngine,
    ReminderFiring,
)
from .statistics_engine import StatisticsEngine
from .streak_engine import StreakEngine, StreakResult

__all__ = [
    "Daily",
    "EveryNDays",
    "FrequencyEngine",
    "FrequencyPolicy",
    "HabitEngine",
    "HabitNudge",
    "InvalidPolicyError",
    "InvalidScheduleSpecError",
    "InvalidXpError",
    "LevelInfo",
    "ProgressionEngine",
    "ReminderCheckContext",
    "ReminderEngine",
    "ReminderFiring",
    "SpecificDays",
    "StatisticsEngine",
    "StreakEngine",
    "StreakResult",
    "TaskQuestEngineError",
    "Weekly",
]
