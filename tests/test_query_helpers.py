"""Tests for helpers/query_helpers.py - views, ordering and counters."""

from __future__ import annotations

from datetime import date

import pytest

from taskflow import const
from taskflow.helpers.query_helpers import (
    checklist_progress,
    filter_tasks,
    sort_tasks,
    task_stats,
)
from tests.helpers import make_task

TODAY = date(2025, 4, 7)


@pytest.fixture
def tasks() -> list:
    """A mix of overdue, due-today, future, recurring and completed tasks."""
    return [
        make_task(title="Future", due_date="2025-04-20"),
        make_task(title="Done", due_date="2025-04-01", completed=True),
        make_task(title="Today", due_date="2025-04-07", recurrence="daily"),
        make_task(title="Overdue", due_date="2025-04-05"),
        make_task(title="Done today", due_date="2025-04-07", completed=True),
    ]


def _titles(tasks: list) -> list[str]:
    return [task["title"] for task in tasks]


class TestFilterTasks:
    """Named views."""

    @pytest.mark.parametrize(
        ("view", "expected"),
        [
            (const.VIEW_ALL, ["Future", "Done", "Today", "Overdue", "Done today"]),
            (const.VIEW_ACTIVE, ["Future", "Today", "Overdue"]),
            (const.VIEW_COMPLETED, ["Done", "Done today"]),
            (const.VIEW_OVERDUE, ["Overdue"]),
            (const.VIEW_TODAY, ["Today"]),
            (const.VIEW_RECURRING, ["Today"]),
        ],
    )
    def test_views(self, tasks: list, view: str, expected: list[str]) -> None:
        """Completed tasks never count as overdue or due today."""
        assert _titles(filter_tasks(tasks, view, TODAY)) == expected

    def test_unknown_view(self, tasks: list) -> None:
        """Unknown views raise ValueError."""
        with pytest.raises(ValueError):
            filter_tasks(tasks, "someday", TODAY)


class TestSortTasks:
    """Open first, then by due date."""

    def test_sort(self, tasks: list) -> None:
        """Stable: same-day tasks keep collection order."""
        assert _titles(sort_tasks(tasks)) == [
            "Overdue",
            "Today",
            "Future",
            "Done",
            "Done today",
        ]

    def test_sort_does_not_mutate(self, tasks: list) -> None:
        """The input list keeps its order."""
        sort_tasks(tasks)
        assert _titles(tasks)[0] == "Future"


class TestStats:
    """Counters."""

    def test_stats(self, tasks: list) -> None:
        """Total, completed, active, overdue and due today."""
        assert task_stats(tasks, TODAY) == {
            "total": 5,
            "completed": 2,
            "active": 3,
            "overdue": 1,
            "due_today": 1,
        }

    def test_empty(self) -> None:
        """No tasks, all zeros."""
        assert task_stats([], TODAY)["total"] == 0

    def test_checklist_progress(self) -> None:
        """Checked vs total."""
        task = make_task(
            checklist=[
                {"text": "a", "checked": True},
                {"text": "b"},
                {"text": "c", "checked": True},
            ]
        )

        assert checklist_progress(task) == {"checked": 2, "total": 3}
