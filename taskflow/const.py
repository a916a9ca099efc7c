# File: const.py
"""Constants for the TaskFlow recurrence engine.

This file centralizes data keys, defaults, frequency names, weekday labels and
error translation keys for consistency across engines, helpers and the task
manager.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Frequencies
# ------------------------------------------------------------------------------------------------
FREQUENCY_DAILY = "daily"
FREQUENCY_MONTHLY = "monthly"
FREQUENCY_NONE = "none"
FREQUENCY_WEEKLY = "weekly"
FREQUENCY_YEARLY = "yearly"

# Recurring frequencies only (FREQUENCY_NONE is stored as None)
RECURRING_FREQUENCIES = frozenset(
    {FREQUENCY_DAILY, FREQUENCY_WEEKLY, FREQUENCY_MONTHLY, FREQUENCY_YEARLY}
)

# ------------------------------------------------------------------------------------------------
# Time Units
# ------------------------------------------------------------------------------------------------
TIME_UNIT_DAYS = "days"
TIME_UNIT_WEEKS = "weeks"
TIME_UNIT_MONTHS = "months"
TIME_UNIT_YEARS = "years"

FREQUENCY_TO_TIME_UNIT = {
    FREQUENCY_DAILY: TIME_UNIT_DAYS,
    FREQUENCY_WEEKLY: TIME_UNIT_WEEKS,
    FREQUENCY_MONTHLY: TIME_UNIT_MONTHS,
    FREQUENCY_YEARLY: TIME_UNIT_YEARS,
}

# Unit labels used by the display formatter ("Every 3 days")
TIME_UNIT_LABELS = {
    FREQUENCY_DAILY: "days",
    FREQUENCY_WEEKLY: "weeks",
    FREQUENCY_MONTHLY: "months",
    FREQUENCY_YEARLY: "years",
}

# ------------------------------------------------------------------------------------------------
# Weekdays (index matches date.weekday(): 0=Monday, 6=Sunday)
# ------------------------------------------------------------------------------------------------
WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

DAYS_PER_WEEK = 7

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# ------------------------------------------------------------------------------------------------
# Priorities
# ------------------------------------------------------------------------------------------------
PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"

PRIORITY_OPTIONS = [PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH]

# ------------------------------------------------------------------------------------------------
# Task States
# ------------------------------------------------------------------------------------------------
TASK_STATE_OPEN = "open"
TASK_STATE_COMPLETED = "completed"

# ------------------------------------------------------------------------------------------------
# Task Views (query_helpers.filter_tasks)
# ------------------------------------------------------------------------------------------------
VIEW_ALL = "all"
VIEW_ACTIVE = "active"
VIEW_COMPLETED = "completed"
VIEW_OVERDUE = "overdue"
VIEW_TODAY = "today"
VIEW_RECURRING = "recurring"

VIEW_OPTIONS = [
    VIEW_ALL,
    VIEW_ACTIVE,
    VIEW_COMPLETED,
    VIEW_OVERDUE,
    VIEW_TODAY,
    VIEW_RECURRING,
]

# ------------------------------------------------------------------------------------------------
# Data Keys: Task
# ------------------------------------------------------------------------------------------------
DATA_TASK_CATEGORY = "category"
DATA_TASK_CHECKLIST = "checklist"
DATA_TASK_COMPLETED = "completed"
DATA_TASK_CREATED_AT = "created_at"
DATA_TASK_DESCRIPTION = "description"
DATA_TASK_DUE_DATE = "due_date"
DATA_TASK_ID = "id"
DATA_TASK_PREDECESSOR_ID = "predecessor_id"
DATA_TASK_PRIORITY = "priority"
DATA_TASK_RECURRENCE = "recurrence"
DATA_TASK_RECURRENCE_PATTERN = "recurrence_pattern"
DATA_TASK_SERIES_ID = "series_id"
DATA_TASK_TITLE = "title"

# Fields a regenerated instance inherits from the completed one
TASK_STATIC_FIELDS = (
    DATA_TASK_TITLE,
    DATA_TASK_DESCRIPTION,
    DATA_TASK_PRIORITY,
    DATA_TASK_CATEGORY,
    DATA_TASK_RECURRENCE,
    DATA_TASK_RECURRENCE_PATTERN,
)

# Fields TaskManager.update_task() may change directly
TASK_EDITABLE_FIELDS = frozenset(
    {
        DATA_TASK_TITLE,
        DATA_TASK_DESCRIPTION,
        DATA_TASK_PRIORITY,
        DATA_TASK_CATEGORY,
    }
)

# ------------------------------------------------------------------------------------------------
# Data Keys: Recurrence Pattern
# ------------------------------------------------------------------------------------------------
DATA_PATTERN_DAY_OF_MONTH = "day_of_month"
DATA_PATTERN_DAYS_OF_WEEK = "days_of_week"
DATA_PATTERN_END_DATE = "end_date"
DATA_PATTERN_INTERVAL = "interval"
DATA_PATTERN_MONTH_OF_YEAR = "month_of_year"

# ------------------------------------------------------------------------------------------------
# Data Keys: Checklist Item
# ------------------------------------------------------------------------------------------------
DATA_CHECKLIST_ITEM_CHECKED = "checked"
DATA_CHECKLIST_ITEM_ID = "id"
DATA_CHECKLIST_ITEM_TEXT = "text"

# ------------------------------------------------------------------------------------------------
# Manager Options
# ------------------------------------------------------------------------------------------------
CONF_MAX_SEARCH_ITERATIONS = "max_search_iterations"
CONF_TIME_ZONE = "time_zone"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_CATEGORY = "personal"
DEFAULT_DESCRIPTION = ""
DEFAULT_INTERVAL = 1
DEFAULT_PRIORITY = PRIORITY_MEDIUM
DEFAULT_TIME_ZONE_NAME = "UTC"

# Safety limit for the next-occurrence search loop
MAX_OCCURRENCE_SEARCH_ITERATIONS = 1000

# Upper bound on days walked forward to land on a selected weekday
MAX_WEEKDAY_SNAP_STEPS = 7

# Day-of-month / month-of-year bounds (month_of_year is 0-based: 0=January)
DAY_OF_MONTH_MIN = 1
DAY_OF_MONTH_MAX = 31
MONTH_OF_YEAR_MIN = 0
MONTH_OF_YEAR_MAX = 11

# ------------------------------------------------------------------------------------------------
# Translation Keys (errors)
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_CHECKLIST_ITEM_NOT_FOUND = "checklist_item_not_found"
TRANS_KEY_ERROR_FIELD_NOT_EDITABLE = "field_not_editable"
TRANS_KEY_ERROR_INVALID_TASK = "invalid_task"
TRANS_KEY_ERROR_INVALID_TITLE = "invalid_title"
TRANS_KEY_ERROR_INVALID_VIEW = "invalid_view"
TRANS_KEY_ERROR_TASK_NOT_FOUND = "task_not_found"

# Display
DISPLAY_DOES_NOT_REPEAT = "Does not repeat"
