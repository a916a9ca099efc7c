"""Tests for TaskManager - the stateful store over the engines."""

from __future__ import annotations

from datetime import UTC, date, datetime
import logging

import pytest
import voluptuous as vol

from taskflow import const
from taskflow.data_builders import EntityValidationError
from taskflow.exceptions import TaskNotFoundError
from taskflow.managers import TaskManager
from taskflow.utils import dt_utils
from tests.helpers import FakeClock, make_task


@pytest.fixture
def manager(fake_clock: FakeClock) -> TaskManager:
    """Empty manager on the fake clock (Monday 2025-04-07 12:00 UTC)."""
    return TaskManager(clock=fake_clock)


def _weekly_input(**overrides: object) -> dict[str, object]:
    return {
        "title": "Gym",
        "due_date": "2025-04-07",
        "recurrence": "weekly",
        "recurrence_pattern": {"interval": 2, "days_of_week": ["Monday", "Thursday"]},
        **overrides,
    }


# =============================================================================
# TEST: SETUP AND OPTIONS
# =============================================================================


class TestSetup:
    """Options validation and loading saved tasks."""

    def test_defaults(self, fake_clock: FakeClock) -> None:
        """No options: UTC and the default search cap."""
        manager = TaskManager(clock=fake_clock)

        assert manager.time_zone.key == "UTC"

    def test_time_zone_option_applied(self, fake_clock: FakeClock) -> None:
        """The time_zone option belongs to the manager, not the module."""
        manager = TaskManager(clock=fake_clock, options={"time_zone": "Europe/Berlin"})

        assert manager.time_zone.key == "Europe/Berlin"
        assert dt_utils.get_default_timezone().key == "UTC"

    def test_managers_keep_their_own_zone(self, fake_clock: FakeClock) -> None:
        """A second manager never shifts the first one's "today"."""
        fake_clock.now = datetime(2025, 4, 7, 23, 30, tzinfo=UTC)
        tokyo = TaskManager(clock=fake_clock, options={"time_zone": "Asia/Tokyo"})
        due_tomorrow = tokyo.create_task({"title": "Call", "due_date": "2025-04-08"})
        plants = tokyo.create_task(
            {"title": "Plants", "due_date": "2025-04-07", "recurrence": "daily"}
        )

        utc = TaskManager(clock=fake_clock)

        today_ids = [task["id"] for task in tokyo.get_tasks(const.VIEW_TODAY)]
        assert today_ids == [due_tomorrow["id"]]
        # Tokyo is on the 8th, so the next daily instance is the 9th
        result = tokyo.complete_task(plants["id"])
        assert result.spawned[const.DATA_TASK_DUE_DATE] == "2025-04-09"
        assert utc.get_tasks(const.VIEW_TODAY) == []

    def test_invalid_time_zone_rejected(self) -> None:
        """Unknown zones fail validation."""
        with pytest.raises(vol.Invalid):
            TaskManager(options={"time_zone": "Mars/Olympus"})

    def test_invalid_iteration_cap_rejected(self) -> None:
        """The cap must be a positive integer."""
        with pytest.raises(vol.Invalid):
            TaskManager(options={"max_search_iterations": 0})

    def test_loads_saved_tasks_in_order(self, fake_clock: FakeClock) -> None:
        """Saved tasks are normalized and keep their ids and order."""
        first = make_task(title="First")
        second = make_task(title="Second")

        manager = TaskManager([first, second], clock=fake_clock)

        assert list(manager.tasks) == [first["id"], second["id"]]
        assert manager.get_task(first["id"]) == first

    def test_tasks_property_is_a_copy(self, manager: TaskManager) -> None:
        """Mutating the returned mapping does not touch the store."""
        task = manager.create_task({"title": "A", "due_date": "2025-04-07"})

        manager.tasks.clear()

        assert manager.get_task(task["id"]) == task


# =============================================================================
# TEST: CRUD
# =============================================================================


class TestCrud:
    """Create, read, update, delete."""

    def test_create_task_defaults(self, manager: TaskManager) -> None:
        """New tasks get ids, defaults and a created_at from the clock."""
        task = manager.create_task({"title": "  Buy milk ", "due_date": "2025-04-07"})

        assert task["title"] == "Buy milk"
        assert task["priority"] == const.PRIORITY_MEDIUM
        assert task["category"] == const.DEFAULT_CATEGORY
        assert task["completed"] is False
        assert task["recurrence"] is None
        assert task["recurrence_pattern"] is None
        assert task["created_at"] == "2025-04-07T12:00:00+00:00"
        assert task["series_id"] == task["id"]

    def test_create_weekly_normalizes_pattern(self, manager: TaskManager) -> None:
        """Weekly tasks are created with the due weekday pinned."""
        task = manager.create_task(
            {
                "title": "Report",
                "due_date": "2025-04-11",
                "recurrence": "weekly",
                "recurrence_pattern": {"interval": 1, "days_of_week": ["Monday"]},
            }
        )

        assert task["recurrence_pattern"]["days_of_week"] == ["Friday"]

    def test_create_none_recurrence_has_no_pattern(self, manager: TaskManager) -> None:
        """"none" recurrence is stored as None without a pattern."""
        task = manager.create_task(
            {
                "title": "Once",
                "due_date": "2025-04-07",
                "recurrence": "none",
                "recurrence_pattern": {"interval": 3},
            }
        )

        assert task["recurrence"] is None
        assert task["recurrence_pattern"] is None

    def test_create_empty_title_rejected(self, manager: TaskManager) -> None:
        """Blank titles raise with the title field."""
        with pytest.raises(EntityValidationError) as err:
            manager.create_task({"title": "   ", "due_date": "2025-04-07"})

        assert err.value.field == const.DATA_TASK_TITLE
        assert err.value.translation_key == const.TRANS_KEY_ERROR_INVALID_TITLE

    def test_create_bad_pattern_rejected(self, manager: TaskManager) -> None:
        """Out-of-range pattern fields raise with the pattern field."""
        with pytest.raises(EntityValidationError) as err:
            manager.create_task(
                {
                    "title": "Rent",
                    "due_date": "2025-04-01",
                    "recurrence": "monthly",
                    "recurrence_pattern": {"day_of_month": 32},
                }
            )

        assert err.value.field == const.DATA_TASK_RECURRENCE_PATTERN

    def test_update_static_fields(self, manager: TaskManager) -> None:
        """Title, description, priority and category may be edited."""
        task = manager.create_task({"title": "A", "due_date": "2025-04-07"})

        updated = manager.update_task(
            task["id"], {"title": "B", "priority": "HIGH", "category": "work"}
        )

        assert updated["title"] == "B"
        assert updated["priority"] == const.PRIORITY_HIGH
        assert updated["category"] == "work"
        assert updated["id"] == task["id"]
        assert updated["created_at"] == task["created_at"]

    def test_update_pattern_field_rejected(self, manager: TaskManager) -> None:
        """Due date and recurrence must go through the pattern edits."""
        task = manager.create_task({"title": "A", "due_date": "2025-04-07"})

        with pytest.raises(EntityValidationError) as err:
            manager.update_task(task["id"], {"due_date": "2025-05-01"})

        assert err.value.field == const.DATA_TASK_DUE_DATE
        assert err.value.translation_key == const.TRANS_KEY_ERROR_FIELD_NOT_EDITABLE

    def test_delete_task(self, manager: TaskManager) -> None:
        """Deleted tasks are gone."""
        task = manager.create_task({"title": "A", "due_date": "2025-04-07"})

        removed = manager.delete_task(task["id"])

        assert removed == task
        with pytest.raises(TaskNotFoundError):
            manager.get_task(task["id"])

    def test_unknown_id_raises(self, manager: TaskManager) -> None:
        """Every operation on an unknown id raises TaskNotFoundError."""
        with pytest.raises(TaskNotFoundError) as err:
            manager.complete_task("missing")

        assert err.value.translation_key == const.TRANS_KEY_ERROR_TASK_NOT_FOUND
        assert err.value.placeholders == {"task_id": "missing"}


# =============================================================================
# TEST: PATTERN EDITS
# =============================================================================


class TestPatternEdits:
    """Pattern edits route through PatternEngine and update the store."""

    def test_toggle_due_weekday_relocates(self, manager: TaskManager) -> None:
        """interval 2 [Monday, Thursday] due Monday, Monday off → due Thursday."""
        task = manager.create_task(_weekly_input())

        update = manager.toggle_weekday(task["id"], "Monday")

        stored = manager.get_task(task["id"])
        assert update.applied
        assert stored["due_date"] == "2025-04-10"
        assert stored["recurrence_pattern"]["days_of_week"] == ["Thursday"]

    def test_refused_edit_leaves_store_untouched(self, manager: TaskManager) -> None:
        """Refused edits do not write."""
        task = manager.create_task(_weekly_input())

        update = manager.toggle_weekday(task["id"], "Friday")

        assert not update.applied
        assert manager.get_task(task["id"]) == task

    def test_set_due_date(self, manager: TaskManager) -> None:
        """Moving the due date refits the selection."""
        task = manager.create_task(_weekly_input())

        manager.set_due_date(task["id"], date(2025, 4, 12))

        stored = manager.get_task(task["id"])
        assert stored["due_date"] == "2025-04-12"
        assert stored["recurrence_pattern"]["days_of_week"] == ["Thursday", "Saturday"]

    def test_set_interval_and_recurrence(self, manager: TaskManager) -> None:
        """Interval and frequency edits are stored."""
        task = manager.create_task(_weekly_input())

        manager.set_interval(task["id"], 1)
        assert manager.get_task(task["id"])["recurrence_pattern"]["days_of_week"] == [
            "Monday"
        ]

        manager.set_recurrence(task["id"], None)
        stored = manager.get_task(task["id"])
        assert stored["recurrence"] is None
        assert stored["recurrence_pattern"] is None

    def test_set_end_date(self, manager: TaskManager) -> None:
        """End dates are stored on the pattern."""
        task = manager.create_task(_weekly_input())

        manager.set_end_date(task["id"], "2025-06-30")

        stored = manager.get_task(task["id"])
        assert stored["recurrence_pattern"]["end_date"] == "2025-06-30"


# =============================================================================
# TEST: COMPLETION WORKFLOW
# =============================================================================


class TestCompletionWorkflow:
    """Complete / undo through the manager."""

    def test_complete_and_undo_round_trip(
        self, manager: TaskManager, fake_clock: FakeClock
    ) -> None:
        """Completing spawns the next instance; undo retracts it."""
        task = manager.create_task(
            {"title": "Plants", "due_date": "2025-04-08", "recurrence": "daily"}
        )
        fake_clock.set(2025, 4, 9)

        result = manager.complete_task(task["id"])

        assert result.spawned["due_date"] == "2025-04-10"
        assert len(manager.tasks) == 2

        undone = manager.undo_completion(task["id"])

        assert undone.retracted["id"] == result.spawned["id"]
        assert len(manager.tasks) == 1
        assert manager.get_task(task["id"])["completed"] is False

    def test_completion_logged(
        self,
        manager: TaskManager,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Lifecycle events are logged at INFO."""
        caplog.set_level(logging.INFO, logger=const.LOGGER.name)
        task = manager.create_task(
            {"title": "Plants", "due_date": "2025-04-07", "recurrence": "daily"}
        )

        manager.complete_task(task["id"])

        assert "Task completed: 'Plants' next_due=2025-04-08" in caplog.text

    def test_clock_read_once_per_completion(
        self, manager: TaskManager, fake_clock: FakeClock
    ) -> None:
        """One clock reading per operation."""
        task = manager.create_task(
            {"title": "Plants", "due_date": "2025-04-07", "recurrence": "daily"}
        )
        before = fake_clock.calls

        manager.complete_task(task["id"])

        assert fake_clock.calls - before == 1

    def test_iteration_cap_option(self, fake_clock: FakeClock) -> None:
        """max_search_iterations limits the search."""
        manager = TaskManager(clock=fake_clock, options={"max_search_iterations": 2})
        task = manager.create_task(
            {"title": "Rent", "due_date": "2020-01-01", "recurrence": "monthly"}
        )

        assert manager.preview_next_occurrence(task["id"]) is None

    def test_previews(self, manager: TaskManager) -> None:
        """Previews do not change the store."""
        task = manager.create_task(
            {"title": "Plants", "due_date": "2025-04-07", "recurrence": "daily"}
        )

        assert manager.preview_next_occurrence(task["id"]) == date(2025, 4, 8)
        assert manager.preview_occurrences(task["id"], 3) == [
            date(2025, 4, 8),
            date(2025, 4, 9),
            date(2025, 4, 10),
        ]
        assert len(manager.tasks) == 1


# =============================================================================
# TEST: CHECKLIST
# =============================================================================


class TestChecklist:
    """Checklist CRUD."""

    def test_add_toggle_rename_remove(self, manager: TaskManager) -> None:
        """Full checklist item lifecycle."""
        task = manager.create_task({"title": "Trip", "due_date": "2025-04-07"})

        item = manager.add_checklist_item(task["id"], "Passport")
        other = manager.add_checklist_item(task["id"], "Tickets")
        assert item["checked"] is False
        assert item["id"] != other["id"]

        toggled = manager.toggle_checklist_item(task["id"], item["id"])
        assert toggled["checked"] is True

        renamed = manager.rename_checklist_item(task["id"], item["id"], "Passports")
        assert renamed == {"id": item["id"], "text": "Passports", "checked": True}

        manager.remove_checklist_item(task["id"], other["id"])
        assert manager.get_task(task["id"])["checklist"] == [renamed]

    def test_unknown_item_raises(self, manager: TaskManager) -> None:
        """Unknown item ids raise with the checklist translation key."""
        task = manager.create_task({"title": "Trip", "due_date": "2025-04-07"})

        with pytest.raises(TaskNotFoundError) as err:
            manager.toggle_checklist_item(task["id"], "nope")

        assert (
            err.value.translation_key
            == const.TRANS_KEY_ERROR_CHECKLIST_ITEM_NOT_FOUND
        )

    def test_blank_item_rejected(self, manager: TaskManager) -> None:
        """Blank checklist text is invalid."""
        task = manager.create_task({"title": "Trip", "due_date": "2025-04-07"})

        with pytest.raises(EntityValidationError):
            manager.add_checklist_item(task["id"], "  ")


# =============================================================================
# TEST: VIEWS
# =============================================================================


class TestViews:
    """Views and counters use the clock's local date."""

    @pytest.fixture
    def populated(self, manager: TaskManager) -> TaskManager:
        """Overdue, today, future, recurring and completed tasks."""
        manager.create_task({"title": "Overdue", "due_date": "2025-04-05"})
        manager.create_task({"title": "Today", "due_date": "2025-04-07"})
        manager.create_task(
            {"title": "Future", "due_date": "2025-04-20", "recurrence": "daily"}
        )
        done = manager.create_task({"title": "Done", "due_date": "2025-04-01"})
        manager.complete_task(done["id"])
        return manager

    def _titles(self, tasks: list) -> list[str]:
        return [task["title"] for task in tasks]

    def test_all_sorted_open_first(self, populated: TaskManager) -> None:
        """Open tasks by due date, completed last."""
        assert self._titles(populated.get_tasks()) == [
            "Overdue",
            "Today",
            "Future",
            "Done",
        ]

    @pytest.mark.parametrize(
        ("view", "expected"),
        [
            (const.VIEW_ACTIVE, ["Overdue", "Today", "Future"]),
            (const.VIEW_COMPLETED, ["Done"]),
            (const.VIEW_OVERDUE, ["Overdue"]),
            (const.VIEW_TODAY, ["Today"]),
            (const.VIEW_RECURRING, ["Future"]),
        ],
    )
    def test_views(self, populated: TaskManager, view: str, expected: list) -> None:
        """Each named view selects its tasks."""
        assert self._titles(populated.get_tasks(view)) == expected

    def test_unknown_view_rejected(self, manager: TaskManager) -> None:
        """Unknown view names raise."""
        with pytest.raises(EntityValidationError) as err:
            manager.get_tasks("someday")

        assert err.value.translation_key == const.TRANS_KEY_ERROR_INVALID_VIEW

    def test_stats(self, populated: TaskManager) -> None:
        """Counters match the views."""
        assert populated.get_stats() == {
            "total": 4,
            "completed": 1,
            "active": 3,
            "overdue": 1,
            "due_today": 1,
        }

    def test_today_follows_configured_zone(self, fake_clock: FakeClock) -> None:
        """Late UTC evening is already tomorrow in Tokyo."""
        fake_clock.set(2025, 4, 7, hour=20)
        manager = TaskManager(clock=fake_clock, options={"time_zone": "Asia/Tokyo"})
        manager.create_task({"title": "Tomorrow", "due_date": "2025-04-08"})

        assert self._titles(manager.get_tasks(const.VIEW_TODAY)) == ["Tomorrow"]
