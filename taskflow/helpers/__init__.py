# File: helpers/__init__.py
"""Read-only helper functions for TaskFlow.

These helpers shape task data for presentation; they never change a task.

Submodules:
    - display_helpers: Human-readable recurrence labels
    - query_helpers: Task views, ordering, counters, checklist progress

Usage:
    from . import query_helpers
    from .display_helpers import format_recurrence_label
"""

from . import display_helpers, query_helpers

__all__ = [
    "display_helpers",
    "query_helpers",
]
