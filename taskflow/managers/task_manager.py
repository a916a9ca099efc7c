"""Task Manager - Stateful task store and workflow orchestration.

This manager owns one in-memory task collection and the clock, and routes
every change through the pure engines:
- Creating, editing and deleting tasks (data_builders)
- Pattern edits: due date, weekdays, interval, frequency, end date
  (PatternEngine)
- Complete / undo with next-instance regeneration (TaskEngine)
- Checklist items, views and counters (query_helpers)

ARCHITECTURE:
- TaskManager = STATEFUL store (holds the collection, reads the clock)
- PatternEngine / RecurrenceEngine / TaskEngine = pure logic (STATELESS)

The clock is read once per operation so every decision inside one call
sees the same "now". The manager performs no I/O and no locking; a host
that shares it between threads must serialise calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast
from zoneinfo import ZoneInfo

from .. import const, data_builders as db
from ..engines.pattern_engine import (
    DueDateChanged,
    EndDateChanged,
    IntervalChanged,
    PatternEngine,
    RecurrenceChanged,
    WeekdayToggled,
)
from ..engines.schedule_engine import RecurrenceEngine
from ..engines.task_engine import TaskEngine
from ..exceptions import TaskNotFoundError
from ..helpers import query_helpers
from ..schemas import MANAGER_OPTIONS_SCHEMA
from ..utils.dt_utils import dt_now_local, dt_to_local_date

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import date, datetime

    from ..engines.pattern_engine import PatternEdit, PatternUpdate
    from ..engines.task_engine import TransitionResult
    from ..type_defs import (
        ChecklistItemData,
        ChecklistItemId,
        ManagerOptions,
        TaskData,
        TaskId,
        TasksCollection,
        TaskStats,
    )


__all__ = ["TaskManager"]


class TaskManager:
    """Manager for one task collection.

    Responsibilities:
    - Hold the collection (insertion ordered) and replace it atomically
      with whatever the engines return
    - Read the clock once per operation
    - Raise TaskNotFoundError / EntityValidationError for caller mistakes

    NOT responsible for:
    - Pattern consistency rules (delegated to PatternEngine)
    - Next-occurrence arithmetic (delegated to RecurrenceEngine)
    - Persistence (the caller saves `tasks` however it likes)
    """

    # =========================================================================
    # §0 LIFECYCLE & INITIALIZATION
    # =========================================================================

    def __init__(
        self,
        tasks: Iterable[dict[str, Any]] | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
        options: ManagerOptions | dict[str, Any] | None = None,
    ) -> None:
        """Initialize TaskManager.

        Args:
            tasks: Previously saved tasks; each is normalized by build_task()
            clock: Returns the current (aware) datetime. Defaults to now in
                the configured time zone.
            options: Manager options, validated by MANAGER_OPTIONS_SCHEMA

        Raises:
            voluptuous.Invalid: If the options are malformed
            EntityValidationError: If a saved task is malformed
        """
        validated = MANAGER_OPTIONS_SCHEMA(dict(options or {}))
        self._tz = ZoneInfo(validated[const.CONF_TIME_ZONE])
        self._max_iterations: int = validated[const.CONF_MAX_SEARCH_ITERATIONS]
        self._clock: Callable[[], datetime] = clock or (
            lambda: dt_now_local(self._tz)
        )

        self._tasks: TasksCollection = {}
        for raw in tasks or []:
            task = db.build_task(raw)
            self._tasks[task[const.DATA_TASK_ID]] = task

        const.LOGGER.debug(
            "TaskManager initialized with %d tasks (time zone %s)",
            len(self._tasks),
            self._tz.key,
        )

    @property
    def tasks(self) -> TasksCollection:
        """Return a shallow copy of the collection, ready to be saved."""
        return dict(self._tasks)

    @property
    def time_zone(self) -> ZoneInfo:
        """Return the zone this manager uses to decide what "today" is."""
        return self._tz

    def _now(self) -> datetime:
        return self._clock()

    def _today(self, now: datetime | None = None) -> date:
        return cast("date", dt_to_local_date(now or self._now(), self._tz))

    # =========================================================================
    # §1 TASK CRUD
    # =========================================================================

    def get_task(self, task_id: TaskId) -> TaskData:
        """Return a task by id.

        Raises:
            TaskNotFoundError: If no task has this id
        """
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(
                f"Task not found: {task_id}",
                translation_key=const.TRANS_KEY_ERROR_TASK_NOT_FOUND,
                placeholders={"task_id": str(task_id)},
            )
        return task

    def create_task(self, user_input: dict[str, Any]) -> TaskData:
        """Create a task from caller input and append it to the collection."""
        data = dict(user_input)
        data.setdefault(const.DATA_TASK_CREATED_AT, self._now().isoformat())
        task = db.build_task(data)
        self._tasks[task[const.DATA_TASK_ID]] = task

        const.LOGGER.info(
            "Task created: '%s' due=%s recurrence=%s",
            task[const.DATA_TASK_TITLE],
            task[const.DATA_TASK_DUE_DATE],
            task[const.DATA_TASK_RECURRENCE],
        )
        return task

    def update_task(self, task_id: TaskId, changes: dict[str, Any]) -> TaskData:
        """Edit the static text fields of a task.

        Only title, description, priority and category may change here;
        due date and recurrence go through the pattern edit methods so the
        pattern stays consistent.

        Raises:
            TaskNotFoundError: If no task has this id
            EntityValidationError: If a field is not editable or invalid
        """
        task = self.get_task(task_id)
        for key in changes:
            if key not in const.TASK_EDITABLE_FIELDS:
                raise db.EntityValidationError(
                    field=key,
                    translation_key=const.TRANS_KEY_ERROR_FIELD_NOT_EDITABLE,
                    placeholders={"field": key},
                )

        updated = db.build_task({**task, **changes})
        self._tasks[task_id] = updated
        const.LOGGER.info(
            "Task updated: '%s' fields=%s",
            updated[const.DATA_TASK_TITLE],
            sorted(changes),
        )
        return updated

    def delete_task(self, task_id: TaskId) -> TaskData:
        """Remove a task and return it.

        Other instances of the same series are kept; a successor whose
        predecessor is deleted simply can no longer be retracted by undo.
        """
        task = self.get_task(task_id)
        del self._tasks[task_id]
        const.LOGGER.info("Task deleted: '%s'", task[const.DATA_TASK_TITLE])
        return task

    # =========================================================================
    # §2 PATTERN EDITS
    # =========================================================================

    def _apply_edit(self, task_id: TaskId, edit: PatternEdit) -> PatternUpdate:
        task = self.get_task(task_id)
        update = PatternEngine.reconcile(task, edit, self._today())
        if update.applied:
            self._tasks[task_id] = update.apply_to(task)
            const.LOGGER.debug(
                "Pattern edit %s applied to '%s': due=%s relocated=%s",
                type(edit).__name__,
                task[const.DATA_TASK_TITLE],
                update.due_date,
                update.relocated,
            )
        return update

    def set_due_date(self, task_id: TaskId, due_date: date | str) -> PatternUpdate:
        """Move the due date, refitting a weekly selection around it."""
        return self._apply_edit(task_id, DueDateChanged(due_date))

    def toggle_weekday(self, task_id: TaskId, day: str) -> PatternUpdate:
        """Select or deselect one weekday of a weekly task."""
        return self._apply_edit(task_id, WeekdayToggled(day))

    def set_interval(self, task_id: TaskId, interval: Any) -> PatternUpdate:
        """Change "every N units"; invalid input becomes 1."""
        return self._apply_edit(task_id, IntervalChanged(interval))

    def set_recurrence(self, task_id: TaskId, frequency: str | None) -> PatternUpdate:
        """Switch frequency, or stop recurring with None / "none"."""
        return self._apply_edit(task_id, RecurrenceChanged(frequency))

    def set_end_date(
        self, task_id: TaskId, end_date: date | str | None
    ) -> PatternUpdate:
        """Set or clear the series end date."""
        return self._apply_edit(task_id, EndDateChanged(end_date))

    # =========================================================================
    # §3 COMPLETION WORKFLOW
    # =========================================================================

    def complete_task(self, task_id: TaskId) -> TransitionResult:
        """Mark a task completed and spawn the next instance if it recurs.

        Raises:
            TaskNotFoundError: If no task has this id
        """
        task = self.get_task(task_id)
        now = self._now()
        result = TaskEngine.complete_recurring(
            task,
            self._tasks,
            self._today(now),
            self._max_iterations,
            created_at=now.isoformat(),
        )
        self._tasks = result.tasks

        if result.changed:
            const.LOGGER.info(
                "Task completed: '%s' next_due=%s",
                task[const.DATA_TASK_TITLE],
                result.spawned[const.DATA_TASK_DUE_DATE] if result.spawned else None,
            )
        return result

    def undo_completion(self, task_id: TaskId) -> TransitionResult:
        """Reopen a completed task and retract the instance it spawned.

        Raises:
            TaskNotFoundError: If no task has this id
        """
        task = self.get_task(task_id)
        result = TaskEngine.undo_recurring_completion(
            task, self._tasks, self._today()
        )
        self._tasks = result.tasks

        if result.changed:
            const.LOGGER.info(
                "Task completion undone: '%s' retracted=%s",
                task[const.DATA_TASK_TITLE],
                result.retracted[const.DATA_TASK_ID] if result.retracted else None,
            )
        return result

    def preview_next_occurrence(self, task_id: TaskId) -> date | None:
        """Return the date a completion right now would schedule next."""
        task = self.get_task(task_id)
        return RecurrenceEngine(task, self._max_iterations).get_next_occurrence(
            self._today()
        )

    def preview_occurrences(self, task_id: TaskId, count: int = 5) -> list[date]:
        """Return the next `count` dates the series would produce."""
        task = self.get_task(task_id)
        return RecurrenceEngine(task, self._max_iterations).preview_occurrences(
            self._today(), count
        )

    # =========================================================================
    # §4 CHECKLIST
    # =========================================================================

    def _find_item_index(self, task: TaskData, item_id: ChecklistItemId) -> int:
        for index, item in enumerate(task.get(const.DATA_TASK_CHECKLIST) or []):
            if item[const.DATA_CHECKLIST_ITEM_ID] == item_id:
                return index
        raise TaskNotFoundError(
            f"Checklist item not found: {item_id}",
            translation_key=const.TRANS_KEY_ERROR_CHECKLIST_ITEM_NOT_FOUND,
            placeholders={
                "task_id": task[const.DATA_TASK_ID],
                "item_id": str(item_id),
            },
        )

    def _replace_checklist(
        self, task: TaskData, checklist: list[ChecklistItemData]
    ) -> None:
        self._tasks[task[const.DATA_TASK_ID]] = cast(
            "TaskData", {**task, const.DATA_TASK_CHECKLIST: checklist}
        )

    def add_checklist_item(self, task_id: TaskId, text: str) -> ChecklistItemData:
        """Append an unchecked item to a task's checklist."""
        task = self.get_task(task_id)
        item = db.build_checklist_item(text)
        self._replace_checklist(task, [*task[const.DATA_TASK_CHECKLIST], item])
        return item

    def toggle_checklist_item(
        self, task_id: TaskId, item_id: ChecklistItemId
    ) -> ChecklistItemData:
        """Flip the checked state of one checklist item."""
        task = self.get_task(task_id)
        index = self._find_item_index(task, item_id)
        checklist = list(task[const.DATA_TASK_CHECKLIST])
        old = checklist[index]
        checklist[index] = db.build_checklist_item(
            old[const.DATA_CHECKLIST_ITEM_TEXT],
            checked=not old[const.DATA_CHECKLIST_ITEM_CHECKED],
            item_id=item_id,
        )
        self._replace_checklist(task, checklist)
        return checklist[index]

    def rename_checklist_item(
        self, task_id: TaskId, item_id: ChecklistItemId, text: str
    ) -> ChecklistItemData:
        """Change the text of one checklist item."""
        task = self.get_task(task_id)
        index = self._find_item_index(task, item_id)
        checklist = list(task[const.DATA_TASK_CHECKLIST])
        checklist[index] = db.build_checklist_item(
            text,
            checked=checklist[index][const.DATA_CHECKLIST_ITEM_CHECKED],
            item_id=item_id,
        )
        self._replace_checklist(task, checklist)
        return checklist[index]

    def remove_checklist_item(
        self, task_id: TaskId, item_id: ChecklistItemId
    ) -> ChecklistItemData:
        """Delete one checklist item and return it."""
        task = self.get_task(task_id)
        index = self._find_item_index(task, item_id)
        checklist = list(task[const.DATA_TASK_CHECKLIST])
        removed = checklist.pop(index)
        self._replace_checklist(task, checklist)
        return removed

    # =========================================================================
    # §5 VIEWS
    # =========================================================================

    def get_tasks(self, view: str = const.VIEW_ALL) -> list[TaskData]:
        """Return the tasks of a named view, open first then by due date.

        Raises:
            EntityValidationError: If the view is unknown
        """
        if view not in const.VIEW_OPTIONS:
            raise db.EntityValidationError(
                field="view",
                translation_key=const.TRANS_KEY_ERROR_INVALID_VIEW,
                placeholders={"view": str(view)},
            )
        selected = query_helpers.filter_tasks(
            self._tasks.values(), view, self._today()
        )
        return query_helpers.sort_tasks(selected)

    def get_stats(self) -> TaskStats:
        """Return the counters shown beside the views."""
        return query_helpers.task_stats(self._tasks.values(), self._today())
