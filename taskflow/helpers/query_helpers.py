"""Query helper functions for TaskFlow task lists.

This module provides read-only projections over a task collection: the named
views, the list ordering and the counters shown beside them. Functions take
an explicit `today` so results never depend on the wall clock.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_parse_date

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ..type_defs import ChecklistProgress, TaskData, TaskStats


def _due(task: TaskData) -> date | None:
    return dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))


def is_overdue(task: TaskData, today: date) -> bool:
    """Open and due strictly before today."""
    due = _due(task)
    return not task.get(const.DATA_TASK_COMPLETED) and due is not None and due < today


def is_due_today(task: TaskData, today: date) -> bool:
    """Open and due exactly today."""
    return not task.get(const.DATA_TASK_COMPLETED) and _due(task) == today


_VIEW_PREDICATES: dict[str, Callable[[TaskData, date], bool]] = {
    const.VIEW_ALL: lambda task, today: True,
    const.VIEW_ACTIVE: lambda task, today: not task.get(const.DATA_TASK_COMPLETED),
    const.VIEW_COMPLETED: lambda task, today: bool(task.get(const.DATA_TASK_COMPLETED)),
    const.VIEW_OVERDUE: is_overdue,
    const.VIEW_TODAY: is_due_today,
    const.VIEW_RECURRING: lambda task, today: bool(task.get(const.DATA_TASK_RECURRENCE)),
}


def filter_tasks(tasks: Iterable[TaskData], view: str, today: date) -> list[TaskData]:
    """Return the tasks belonging to a named view.

    Args:
        tasks: Tasks to filter (any iterable, e.g. collection.values())
        view: One of const.VIEW_OPTIONS
        today: Local calendar date used by the overdue/today views

    Raises:
        ValueError: If the view is unknown
    """
    predicate = _VIEW_PREDICATES.get(view)
    if predicate is None:
        raise ValueError(f"Unknown task view: {view}")
    return [task for task in tasks if predicate(task, today)]


def sort_tasks(tasks: Iterable[TaskData]) -> list[TaskData]:
    """Order tasks open-first, then by due date (unparseable dates last).

    The sort is stable, so tasks due the same day keep collection order.
    """

    def _key(task: TaskData) -> tuple[bool, bool, date]:
        due = _due(task)
        return (
            bool(task.get(const.DATA_TASK_COMPLETED)),
            due is None,
            due or date.max,
        )

    return sorted(tasks, key=_key)


def task_stats(tasks: Iterable[TaskData], today: date) -> TaskStats:
    """Count total, completed, active, overdue and due-today tasks."""
    stats: TaskStats = {
        "total": 0,
        "completed": 0,
        "active": 0,
        "overdue": 0,
        "due_today": 0,
    }
    for task in tasks:
        stats["total"] += 1
        if task.get(const.DATA_TASK_COMPLETED):
            stats["completed"] += 1
            continue
        stats["active"] += 1
        if is_overdue(task, today):
            stats["overdue"] += 1
        elif is_due_today(task, today):
            stats["due_today"] += 1
    return stats


def checklist_progress(task: TaskData) -> ChecklistProgress:
    """Return how many checklist items are checked out of the total."""
    checklist = task.get(const.DATA_TASK_CHECKLIST) or []
    return {
        "checked": sum(
            1 for item in checklist if item.get(const.DATA_CHECKLIST_ITEM_CHECKED)
        ),
        "total": len(checklist),
    }
