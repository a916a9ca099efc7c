"""Type definitions for TaskFlow data structures.

Tasks travel through the engines as plain dicts so the task store can hand
over whatever it loaded without a conversion step. TypedDict documents the
fixed keys for static analysis only; runtime code still uses ``.get()`` with
defaults where a caller may have left a field out.

IMPORTANT: This file must NOT import from engines, managers or helpers to
avoid circular dependencies. Only typing machinery is imported here.
"""

from typing import NotRequired, TypedDict

# =============================================================================
# Type Aliases (for readability)
# =============================================================================

TaskId = str  # UUID string
ChecklistItemId = str  # UUID string
ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
ISODate = str  # ISO 8601 date string (no time) "2026-01-18"
WeekdayName = str  # "Monday" .. "Sunday"


# =============================================================================
# Task Types
# =============================================================================


class ChecklistItemData(TypedDict):
    """A single subtask on a task's checklist."""

    id: ChecklistItemId
    text: str
    checked: bool


class RecurrencePatternData(TypedDict):
    """Recurrence rule attached to a recurring task.

    days_of_week keeps selection order (oldest first); the Pattern Validator
    relies on it for eviction and relocation.
    """

    interval: int  # "every N units", always >= 1
    days_of_week: list[WeekdayName]  # Weekly only
    day_of_month: int | None  # 1-31, clamped per occurrence
    month_of_year: int | None  # 0-11 (0=January), yearly only
    end_date: ISODate | None  # No occurrence strictly after this date


class TaskData(TypedDict):
    """Type definition for a task instance.

    recurrence_pattern is present iff recurrence is not None.
    """

    id: TaskId
    title: str
    description: str
    priority: str  # PRIORITY_* constant
    category: str
    due_date: ISODate
    completed: bool
    recurrence: str | None  # FREQUENCY_* constant, never FREQUENCY_NONE
    recurrence_pattern: RecurrencePatternData | None
    checklist: list[ChecklistItemData]
    created_at: ISODatetime
    series_id: NotRequired[TaskId]  # First instance of the series
    predecessor_id: NotRequired[TaskId | None]  # Instance that spawned this one


class ManagerOptions(TypedDict, total=False):
    """Options accepted by TaskManager (validated by MANAGER_OPTIONS_SCHEMA)."""

    time_zone: str
    max_search_iterations: int


# =============================================================================
# Collection Type Aliases
# =============================================================================

TasksCollection = dict[TaskId, TaskData]


# =============================================================================
# Query Result Types
# =============================================================================


class TaskStats(TypedDict):
    """Counters shown beside the task views (query_helpers.task_stats)."""

    total: int
    completed: int
    active: int
    overdue: int
    due_today: int


class ChecklistProgress(TypedDict):
    """Checked vs total subtasks of one task."""

    checked: int
    total: int
