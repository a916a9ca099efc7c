"""Task Engine - Pure logic for completion, regeneration and undo.

This engine provides stateless, pure Python functions for:
- State transition validation (open <-> completed)
- Completing a recurring task and spawning its next instance
- Undoing a completion and retracting the spawned instance

ARCHITECTURE: This is a pure logic engine with no storage or clock of its own.
All functions are static methods that operate on passed-in data and return a
NEW collection; inputs are never mutated. State management belongs in
TaskManager.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import TYPE_CHECKING, Any, cast
import copy
import uuid

from .. import const
from ..data_builders import regenerate_checklist
from ..utils.dt_utils import (
    dt_now_iso,
    dt_parse_date,
    dt_to_local_date,
    get_default_timezone,
)
from .schedule_engine import calculate_next_occurrence

if TYPE_CHECKING:
    from datetime import date

    from ..type_defs import TaskData, TaskId, TasksCollection


# =============================================================================
# TRANSITION RESULT DATA STRUCTURE
# =============================================================================


@dataclass
class TransitionResult:
    """Outcome of a completion or undo.

    Attributes:
        tasks: The new collection (insertion ordered)
        task: The acted-upon task as it is in the new collection
        spawned: Next instance created by a completion, or None
        retracted: Successor removed by an undo, or None
        changed: False when the action was a no-op
    """

    tasks: TasksCollection
    task: TaskData
    spawned: TaskData | None = None
    retracted: TaskData | None = None
    changed: bool = True


# =============================================================================
# TASK ENGINE
# =============================================================================


class TaskEngine:
    """Pure logic engine for task completion workflow.

    All methods are static - no instance state.
    """

    # Valid state transitions matrix
    VALID_TRANSITIONS: dict[str, list[str]] = {
        const.TASK_STATE_OPEN: [const.TASK_STATE_COMPLETED],
        # Undo reopens; a completed instance is otherwise terminal
        const.TASK_STATE_COMPLETED: [const.TASK_STATE_OPEN],
    }

    # =========================================================================
    # STATE TRANSITION LOGIC
    # =========================================================================

    @staticmethod
    def get_state(task: TaskData | dict[str, Any]) -> str:
        """Return TASK_STATE_COMPLETED or TASK_STATE_OPEN for a task."""
        if task.get(const.DATA_TASK_COMPLETED):
            return const.TASK_STATE_COMPLETED
        return const.TASK_STATE_OPEN

    @staticmethod
    def can_transition(current_state: str, target_state: str) -> bool:
        """Validate if a state transition is allowed.

        Args:
            current_state: Current task state
            target_state: Desired new state

        Returns:
            True if transition is valid, False otherwise
        """
        valid_targets = TaskEngine.VALID_TRANSITIONS.get(current_state, [])
        return target_state in valid_targets

    # =========================================================================
    # COMPLETE / UNDO
    # =========================================================================

    @staticmethod
    def complete_recurring(
        task: TaskData,
        tasks: TasksCollection,
        completion_time: date | datetime,
        max_iterations: int = const.MAX_OCCURRENCE_SEARCH_ITERATIONS,
        created_at: str | None = None,
    ) -> TransitionResult:
        """Complete a task and, when it recurs, append its next instance.

        The completed instance stays in the collection as history. The next
        due date comes from calculate_next_occurrence() with the completion
        time as "now"; when the series has no further occurrence nothing is
        spawned.

        The spawned instance is stamped with `created_at` when given, else
        with the completion time (midnight in the default zone for a date).

        Completing an already completed task is a no-op (changed=False).
        """
        task_id = task[const.DATA_TASK_ID]
        current = tasks.get(task_id, task)

        if not TaskEngine.can_transition(
            TaskEngine.get_state(current), const.TASK_STATE_COMPLETED
        ):
            const.LOGGER.debug("TaskEngine: Task %s already completed", task_id)
            return TransitionResult(tasks=dict(tasks), task=current, changed=False)

        completed = cast("TaskData", {**current, const.DATA_TASK_COMPLETED: True})
        new_tasks = dict(tasks)
        new_tasks[task_id] = completed

        next_due = calculate_next_occurrence(current, completion_time, max_iterations)
        if next_due is None:
            if current.get(const.DATA_TASK_RECURRENCE):
                const.LOGGER.debug(
                    "TaskEngine: Series of task %s has no further occurrence",
                    task_id,
                )
            return TransitionResult(tasks=new_tasks, task=completed)

        if created_at is None:
            stamp = (
                completion_time
                if isinstance(completion_time, datetime)
                else datetime.combine(
                    completion_time, time.min, get_default_timezone()
                )
            )
            created_at = stamp.isoformat()
        spawned = TaskEngine.build_next_instance(current, next_due, created_at)
        new_tasks[spawned[const.DATA_TASK_ID]] = spawned
        const.LOGGER.debug(
            "TaskEngine: Task %s spawned %s due %s",
            task_id,
            spawned[const.DATA_TASK_ID],
            spawned[const.DATA_TASK_DUE_DATE],
        )
        return TransitionResult(tasks=new_tasks, task=completed, spawned=spawned)

    @staticmethod
    def undo_recurring_completion(
        task: TaskData,
        tasks: TasksCollection,
        reference_time: date | datetime,
    ) -> TransitionResult:
        """Reopen a completed task and retract the instance it spawned.

        The successor is found by explicit link (see find_spawned_successor).
        No successor is a normal case: only the completed flag is reverted.
        Undoing an open task is a no-op (changed=False).
        """
        task_id = task[const.DATA_TASK_ID]
        current = tasks.get(task_id, task)

        if not TaskEngine.can_transition(
            TaskEngine.get_state(current), const.TASK_STATE_OPEN
        ):
            const.LOGGER.debug("TaskEngine: Task %s is not completed", task_id)
            return TransitionResult(tasks=dict(tasks), task=current, changed=False)

        reopened = cast("TaskData", {**current, const.DATA_TASK_COMPLETED: False})
        new_tasks = dict(tasks)
        new_tasks[task_id] = reopened

        successor = TaskEngine.find_spawned_successor(task_id, tasks, reference_time)
        if successor is not None:
            del new_tasks[successor[const.DATA_TASK_ID]]
            const.LOGGER.debug(
                "TaskEngine: Retracted %s spawned by %s",
                successor[const.DATA_TASK_ID],
                task_id,
            )

        return TransitionResult(tasks=new_tasks, task=reopened, retracted=successor)

    # =========================================================================
    # REGENERATION HELPERS
    # =========================================================================

    @staticmethod
    def build_next_instance(
        task: TaskData,
        next_due: date,
        created_at: str | None = None,
    ) -> TaskData:
        """Clone a task as the next open instance of its series.

        Inherits the static fields (deep-copied so the pattern is not
        shared), gets a new id, the new due date, an unchecked checklist
        with fresh item ids, a fresh created_at, and series links.
        """
        new_id: TaskId = str(uuid.uuid4())
        inherited = {
            key: copy.deepcopy(task.get(key)) for key in const.TASK_STATIC_FIELDS
        }
        return cast(
            "TaskData",
            {
                const.DATA_TASK_ID: new_id,
                **inherited,
                const.DATA_TASK_DUE_DATE: next_due.isoformat(),
                const.DATA_TASK_COMPLETED: False,
                const.DATA_TASK_CHECKLIST: regenerate_checklist(
                    task.get(const.DATA_TASK_CHECKLIST)
                ),
                const.DATA_TASK_CREATED_AT: created_at or dt_now_iso(),
                const.DATA_TASK_SERIES_ID: task.get(const.DATA_TASK_SERIES_ID)
                or task[const.DATA_TASK_ID],
                const.DATA_TASK_PREDECESSOR_ID: task[const.DATA_TASK_ID],
            },
        )

    @staticmethod
    def find_spawned_successor(
        task_id: TaskId,
        tasks: TasksCollection,
        reference_time: date | datetime,
    ) -> TaskData | None:
        """Find the open instance a completion of task_id spawned.

        Matches predecessor_id == task_id, not completed, and due strictly
        after the reference date. Returns None when there is none.
        """
        reference = dt_to_local_date(reference_time)
        for candidate in tasks.values():
            if candidate.get(const.DATA_TASK_PREDECESSOR_ID) != task_id:
                continue
            if candidate.get(const.DATA_TASK_COMPLETED):
                continue
            due = dt_parse_date(candidate.get(const.DATA_TASK_DUE_DATE))
            if due is None or (reference is not None and due <= reference):
                continue
            return candidate
        return None


# Module-level aliases for callers that prefer plain functions
complete_recurring = TaskEngine.complete_recurring
undo_recurring_completion = TaskEngine.undo_recurring_completion
