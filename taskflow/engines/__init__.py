"""Engine modules for TaskFlow.

Contains specialized computation engines:
- pattern_engine: Keeps due date, interval and weekday selection consistent
- schedule_engine: Next-occurrence calculation
- task_engine: Complete / regenerate / undo workflow
"""

# Use relative imports within package to avoid mypy module resolution issues
from .pattern_engine import (
    DueDateChanged,
    EndDateChanged,
    IntervalChanged,
    PatternEdit,
    PatternEngine,
    PatternUpdate,
    RecurrenceChanged,
    WeekdayToggled,
    validate_pattern_on_due_date_change,
    validate_pattern_on_interval_change,
    validate_pattern_on_weekday_toggle,
)
from .schedule_engine import RecurrenceEngine, calculate_next_occurrence
from .task_engine import (
    TaskEngine,
    TransitionResult,
    complete_recurring,
    undo_recurring_completion,
)

__all__ = [
    "DueDateChanged",
    "EndDateChanged",
    "IntervalChanged",
    "PatternEdit",
    "PatternEngine",
    "PatternUpdate",
    "RecurrenceChanged",
    "RecurrenceEngine",
    "TaskEngine",
    "TransitionResult",
    "WeekdayToggled",
    "calculate_next_occurrence",
    "complete_recurring",
    "undo_recurring_completion",
    "validate_pattern_on_due_date_change",
    "validate_pattern_on_interval_change",
    "validate_pattern_on_weekday_toggle",
]
