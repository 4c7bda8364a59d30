"""Manager modules for TaskQuest integration.

Managers orchestrate workflows and coordinate between engines.
They are stateful, event-aware, and handle persistence and delivery.
"""

from .base_manager import BaseManager
from .habit_manager import HabitManager
from .notification_manager import NotificationManager
from .progression_manager import ProgressionManager
from .reminder_manager import ReminderManager

__all__ = [
    "BaseManager",
    "HabitManager",
    "NotificationManager",
    "ProgressionManager",
    "ReminderManager",
]
