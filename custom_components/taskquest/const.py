# File: const.py
"""Constants for the TaskQuest integration.

This file centralizes configuration keys, defaults, storage keys, service names,
frequency and reminder vocabularies, and progression tuning values used across
the integration.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
TASKQUEST_TITLE = "TaskQuest"

# Integration Domain
DOMAIN = "taskquest"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms (engine-only integration, no entities)
PLATFORMS: list[str] = []

# Coordinator
COORDINATOR = "coordinator"
COORDINATOR_SUFFIX = "_coordinator"

# Storage and Versioning
STORAGE_MANAGER = "storage_manager"
STORAGE_KEY = "taskquest_data"
STORAGE_VERSION = 1
SCHEMA_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys / Defaults
# ------------------------------------------------------------------------------------------------
CONF_NOTIFY_SERVICE = "notify_service"
CONF_CHECK_INTERVAL = "check_interval"

DEFAULT_NOTIFY_SERVICE = "notify.notify"
DEFAULT_CHECK_INTERVAL = 30  # seconds
MIN_CHECK_INTERVAL = 10
MAX_CHECK_INTERVAL = 300

DEFAULT_ZERO = 0

# ------------------------------------------------------------------------------------------------
# Storage Buckets
# ------------------------------------------------------------------------------------------------
DATA_META = "meta"
DATA_META_SCHEMA_VERSION = "schema_version"
DATA_META_CREATED_AT = "created_at"

DATA_HABITS = "habits"
DATA_REMINDERS = "reminders"
DATA_PROFILE = "profile"

# Shared entity fields
DATA_ID = "id"
DATA_OWNER_ID = "owner_id"
DATA_TITLE = "title"
DATA_DESCRIPTION = "description"
DATA_ICON = "icon"
DATA_CREATED_AT = "created_at"

# Habit fields
DATA_HABIT_FREQUENCY = "frequency"
DATA_HABIT_CUSTOM_DAYS = "custom_days"
DATA_HABIT_COLOR = "color"
DATA_HABIT_COMPLETIONS = "completions"
DATA_HABIT_CURRENT_STREAK = "current_streak"
DATA_HABIT_BEST_STREAK = "best_streak"
DATA_HABIT_XP = "xp"
DATA_HABIT_TOTAL_COMPLETIONS = "total_completions"
DATA_HABIT_YEARLY_STATS = "yearly_stats"

# Completion fields
DATA_COMPLETION_COMPLETED_AT = "completed_at"

# Yearly stats fields
DATA_YEARLY_ACHIEVED = "achieved"
DATA_YEARLY_TOTAL_EXPECTED = "total_expected"
DATA_YEARLY_YEAR = "year"

# Reminder fields
DATA_REMINDER_TYPE = "type"
DATA_REMINDER_INTERVAL_UNIT = "interval_unit"
DATA_REMINDER_INTERVAL_VALUE = "interval_value"
DATA_REMINDER_REMIND_AT = "remind_at"
DATA_REMINDER_IS_ACTIVE = "is_active"

# Profile fields
DATA_PROFILE_TOTAL_XP = "total_xp"
DATA_PROFILE_TASK_XP = "task_xp"
DATA_PROFILE_LEVEL = "level"

DEFAULT_OWNER_ID = "default"
DEFAULT_HABIT_COLOR = "#6366f1"
DEFAULT_HABIT_ICON = "✨"
DEFAULT_REMINDER_ICON = "🔔"

# ------------------------------------------------------------------------------------------------
# Frequencies
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_SPECIFIC_DAYS = "specific_days"
FREQUENCY_EVERY_N_DAYS_PREFIX = "every_"
FREQUENCY_EVERY_N_DAYS_SUFFIX = "_days"
FREQUENCY_EVERY_N_DAYS_FMT = "every_{}_days"

# Weekdays for custom_days use 0=Sunday .. 6=Saturday
WEEKDAY_SUNDAY = 0
WEEKDAY_SATURDAY = 6
DAYS_PER_WEEK = 7

# ------------------------------------------------------------------------------------------------
# Progression
# ------------------------------------------------------------------------------------------------
XP_PER_TASK = 10
XP_PER_COMPLETION = 15
STREAK_BONUS_PER_DAY = 2
STREAK_BONUS_CAP = 20
BASE_XP_REQUIREMENT = 100
XP_INCREMENT = 20
CAP_LEVEL = 100

# Float precision for rounding percentages
DATA_FLOAT_PRECISION = 2

# ------------------------------------------------------------------------------------------------
# Reminders
# ------------------------------------------------------------------------------------------------
REMINDER_TYPE_ONE_TIME = "one-time"
REMINDER_TYPE_ONGOING = "ongoing"
REMINDER_TYPES = [REMINDER_TYPE_ONE_TIME, REMINDER_TYPE_ONGOING]

TIME_UNIT_HOURS = "hours"
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"
TIME_UNIT_MONTHS = "months"
REMINDER_INTERVAL_UNITS = [
    TIME_UNIT_HOURS,
    TIME_UNIT_DAYS,
    TIME_UNIT_WEEKS,
    TIME_UNIT_MONTHS,
]

REMINDER_ACTION_DELETE = "delete"
REMINDER_ACTION_RESCHEDULE = "reschedule"
REMINDER_ACTION_UNCHANGED = "unchanged"

REMINDER_DEDUPE_KEY_FMT = "reminder-{}-{}"
HABIT_NUDGE_DEDUPE_KEY_FMT = "daily-habits-{}"
HABIT_NUDGE_HOUR = 20
HABIT_NUDGE_MINUTE = 0

# ------------------------------------------------------------------------------------------------
# Notifications
# ------------------------------------------------------------------------------------------------
NOTIFY_DOMAIN = "notify"
NOTIFY_TITLE = "title"
NOTIFY_MESSAGE = "message"
DISPLAY_DOT = "."

NOTIFY_REMINDER_DEFAULT_MESSAGE = "Time for your reminder!"
NOTIFY_HABIT_NUDGE_TITLE = "Daily Rituals Reminder"
NOTIFY_HABIT_NUDGE_MESSAGE_FMT = "You have {} rituals left to complete today!"
NOTIFY_LEVEL_UP_TITLE = "Level Up!"
NOTIFY_LEVEL_UP_MESSAGE_FMT = "You reached level {}. Keep the quest going!"

# ------------------------------------------------------------------------------------------------
# Events (instance-scoped dispatcher signals)
# ------------------------------------------------------------------------------------------------
SIGNAL_SUFFIX_HABIT_UPDATED = "habit_updated"
SIGNAL_SUFFIX_TASK_COMPLETED = "task_completed"
SIGNAL_SUFFIX_REMINDER_FIRED = "reminder_fired"
SIGNAL_SUFFIX_LEVEL_UP = "level_up"

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_ADD_HABIT = "add_habit"
SERVICE_UPDATE_HABIT = "update_habit"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_TOGGLE_HABIT_COMPLETION = "toggle_habit_completion"
SERVICE_GET_HABIT = "get_habit"
SERVICE_ADD_REMINDER = "add_reminder"
SERVICE_DELETE_REMINDER = "delete_reminder"
SERVICE_SET_REMINDER_ACTIVE = "set_reminder_active"
SERVICE_RECORD_TASK_COMPLETION = "record_task_completion"
SERVICE_GET_LEVEL_INFO = "get_level_info"

FIELD_HABIT_ID = "habit_id"
FIELD_REMINDER_ID = "reminder_id"
FIELD_OWNER_ID = "owner_id"
FIELD_TITLE = "title"
FIELD_DESCRIPTION = "description"
FIELD_ICON = "icon"
FIELD_COLOR = "color"
FIELD_FREQUENCY = "frequency"
FIELD_CUSTOM_DAYS = "custom_days"
FIELD_DATE = "date"
FIELD_TYPE = "type"
FIELD_INTERVAL_UNIT = "interval_unit"
FIELD_INTERVAL_VALUE = "interval_value"
FIELD_REMIND_AT = "remind_at"
FIELD_IS_ACTIVE = "is_active"
FIELD_COUNT = "count"

# ------------------------------------------------------------------------------------------------
# Errors / Translation keys
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_SINGLE_INSTANCE = "single_instance_allowed"
ERROR_HABIT_NOT_FOUND_FMT = "Habit '{}' not found"
ERROR_REMINDER_NOT_FOUND_FMT = "Reminder '{}' not found"
MSG_NO_ENTRY_FOUND = "No TaskQuest entry found"
TRANS_KEY_INVALID_TITLE = "invalid_title"
TRANS_KEY_INVALID_REMIND_AT = "invalid_remind_at"
TRANS_KEY_INVALID_REMINDER_TYPE = "invalid_reminder_type"
