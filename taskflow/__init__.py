# File: __init__.py
"""TaskFlow: recurring task scheduling.

Keeps recurrence patterns consistent while they are edited, computes the next
occurrence of a recurring task, and drives the complete / regenerate / undo
workflow over an in-memory task collection.

Usage:
    from taskflow import TaskManager

    manager = TaskManager(options={"time_zone": "Europe/Berlin"})
    task = manager.create_task(
        {"title": "Water plants", "due_date": "2025-04-07", "recurrence": "daily"}
    )
    manager.complete_task(task["id"])
"""

from .data_builders import EntityValidationError, build_task
from .engines import (
    PatternEngine,
    PatternUpdate,
    RecurrenceEngine,
    TaskEngine,
    TransitionResult,
    calculate_next_occurrence,
    complete_recurring,
    undo_recurring_completion,
    validate_pattern_on_due_date_change,
    validate_pattern_on_interval_change,
    validate_pattern_on_weekday_toggle,
)
from .exceptions import TaskFlowError, TaskNotFoundError
from .helpers.display_helpers import format_recurrence_label
from .managers import TaskManager

__version__ = "0.1.0"

__all__ = [
    "EntityValidationError",
    "PatternEngine",
    "PatternUpdate",
    "RecurrenceEngine",
    "TaskEngine",
    "TaskFlowError",
    "TaskManager",
    "TaskNotFoundError",
    "TransitionResult",
    "build_task",
    "calculate_next_occurrence",
    "complete_recurring",
    "format_recurrence_label",
    "undo_recurring_completion",
    "validate_pattern_on_due_date_change",
    "validate_pattern_on_interval_change",
    "validate_pattern_on_weekday_toggle",
]
