"""Pattern Engine - Pure logic keeping a recurrence pattern consistent.

This engine reconciles a task's due date, recurrence frequency, interval and
weekly weekday selection whenever one of them is edited:
- Due date moves: the new weekday joins (or replaces) the weekly selection
- Weekday toggled: selection grows up to capacity, or shrinks with the due
  date relocating when its own weekday is removed
- Interval changes: capacity shrinks/grows, the selection is truncated

All edits go through one reducer, PatternEngine.reconcile(), which takes a
tagged edit and returns a PatternUpdate. Edits that would break an invariant
are refused (applied=False) rather than raised: they correspond to controls
the UI keeps disabled.

ARCHITECTURE: Pure logic engine. All methods are static and operate on the
passed-in task; nothing is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any

from .. import const
from ..data_builders import build_recurrence_pattern, fit_days_to_capacity
from ..utils.dt_utils import (
    dt_next_weekday,
    dt_parse_date,
    dt_to_local_date,
    dt_today_local,
    normalize_weekday,
    weekday_name,
)

if TYPE_CHECKING:
    from datetime import datetime

    from ..type_defs import ISODate, RecurrencePatternData, TaskData


# =============================================================================
# EDIT EVENTS
# =============================================================================


@dataclass(frozen=True)
class DueDateChanged:
    """The user picked a new due date."""

    due_date: date | str


@dataclass(frozen=True)
class WeekdayToggled:
    """The user toggled one weekday of a weekly selection."""

    day: str


@dataclass(frozen=True)
class IntervalChanged:
    """The user changed "every N units"."""

    interval: Any


@dataclass(frozen=True)
class RecurrenceChanged:
    """The user switched the recurrence frequency (None/"none" to stop)."""

    frequency: str | None


@dataclass(frozen=True)
class EndDateChanged:
    """The user set or cleared the series end date."""

    end_date: date | str | None


PatternEdit = (
    DueDateChanged
    | WeekdayToggled
    | IntervalChanged
    | RecurrenceChanged
    | EndDateChanged
)


# =============================================================================
# RESULT DATA STRUCTURE
# =============================================================================


@dataclass
class PatternUpdate:
    """Outcome of reconciling one edit.

    Attributes:
        due_date: Due date after the edit (ISO)
        recurrence: Recurrence frequency after the edit (None if not recurring)
        pattern: Recurrence pattern after the edit (None iff recurrence is None)
        applied: False when the edit was refused and nothing changed
        relocated: True when the due date moved to keep its weekday selected
        changes: Keys touched by the edit, in the order they changed
    """

    due_date: ISODate
    recurrence: str | None
    pattern: RecurrencePatternData | None
    applied: bool = True
    relocated: bool = False
    changes: list[str] = field(default_factory=list)

    def apply_to(self, task: TaskData) -> TaskData:
        """Return a copy of the task with this update's fields written in."""
        updated = dict(task)
        updated[const.DATA_TASK_DUE_DATE] = self.due_date
        updated[const.DATA_TASK_RECURRENCE] = self.recurrence
        updated[const.DATA_TASK_RECURRENCE_PATTERN] = self.pattern
        return updated  # type: ignore[return-value]


# =============================================================================
# PATTERN ENGINE
# =============================================================================


class PatternEngine:
    """Reducer enforcing the weekly capacity and pinned-weekday invariants.

    For weekly recurrence, after any edit:
    - 1 <= len(days_of_week) <= interval
    - the due date's weekday is in days_of_week
    """

    @staticmethod
    def reconcile(
        task: TaskData,
        edit: PatternEdit,
        today: date | datetime | None = None,
    ) -> PatternUpdate:
        """Apply one edit to a task's (due_date, recurrence, pattern) triple.

        Args:
            task: The task being edited (not mutated)
            edit: One of the edit event dataclasses
            today: Anchor for due-date relocation. Defaults to the local date.

        Returns:
            PatternUpdate describing the new state
        """
        anchor = dt_to_local_date(today) if today is not None else dt_today_local()
        current = PatternEngine._current_state(task)

        if isinstance(edit, DueDateChanged):
            return PatternEngine._on_due_date_changed(current, edit)
        if isinstance(edit, WeekdayToggled):
            return PatternEngine._on_weekday_toggled(current, edit, anchor)
        if isinstance(edit, IntervalChanged):
            return PatternEngine._on_interval_changed(current, edit, anchor)
        if isinstance(edit, RecurrenceChanged):
            return PatternEngine._on_recurrence_changed(current, edit)
        if isinstance(edit, EndDateChanged):
            return PatternEngine._on_end_date_changed(current, edit)

        const.LOGGER.warning("PatternEngine: Unknown edit type %s", type(edit))
        return PatternEngine._refused(current)

    @staticmethod
    def is_consistent(task: TaskData) -> bool:
        """Check the pattern invariants for a task."""
        recurrence = task.get(const.DATA_TASK_RECURRENCE)
        pattern = task.get(const.DATA_TASK_RECURRENCE_PATTERN)
        if (recurrence is None) != (pattern is None):
            return False
        if pattern is None:
            return True

        interval = pattern.get(const.DATA_PATTERN_INTERVAL, 0)
        if not isinstance(interval, int) or interval < 1:
            return False
        if recurrence != const.FREQUENCY_WEEKLY:
            return True

        days = pattern.get(const.DATA_PATTERN_DAYS_OF_WEEK) or []
        due = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        if due is None:
            return False
        return 1 <= len(days) <= interval and weekday_name(due) in days

    # =========================================================================
    # Edit handlers
    # =========================================================================

    @staticmethod
    def _on_due_date_changed(
        current: PatternUpdate, edit: DueDateChanged
    ) -> PatternUpdate:
        """Move the due date; weekly selections follow its weekday."""
        new_due = dt_parse_date(edit.due_date)
        if new_due is None:
            const.LOGGER.debug(
                "PatternEngine: Ignoring unparseable due date %s", edit.due_date
            )
            return PatternEngine._refused(current)

        current.due_date = new_due.isoformat()
        current.changes.append(const.DATA_TASK_DUE_DATE)

        pattern = current.pattern
        if current.recurrence != const.FREQUENCY_WEEKLY or pattern is None:
            return current

        interval = pattern[const.DATA_PATTERN_INTERVAL]
        pattern[const.DATA_PATTERN_DAYS_OF_WEEK] = fit_days_to_capacity(
            pattern[const.DATA_PATTERN_DAYS_OF_WEEK],
            weekday_name(new_due),
            interval,
        )
        current.changes.append(const.DATA_PATTERN_DAYS_OF_WEEK)
        return current

    @staticmethod
    def _on_weekday_toggled(
        current: PatternUpdate, edit: WeekdayToggled, today: date
    ) -> PatternUpdate:
        """Toggle one weekday of a weekly selection."""
        pattern = current.pattern
        if current.recurrence != const.FREQUENCY_WEEKLY or pattern is None:
            const.LOGGER.debug("PatternEngine: Weekday toggle on non-weekly task")
            return PatternEngine._refused(current)

        day = normalize_weekday(edit.day)
        if day is None:
            const.LOGGER.debug("PatternEngine: Unknown weekday %s", edit.day)
            return PatternEngine._refused(current)

        days: list[str] = pattern[const.DATA_PATTERN_DAYS_OF_WEEK]
        interval: int = pattern[const.DATA_PATTERN_INTERVAL]

        # === TOGGLE OFF ===
        if day in days:
            if len(days) <= 1:
                const.LOGGER.debug(
                    "PatternEngine: Refusing to deselect %s, last selected day", day
                )
                return PatternEngine._refused(current)
            days.remove(day)
            current.changes.append(const.DATA_PATTERN_DAYS_OF_WEEK)
            PatternEngine._relocate_if_unpinned(current, today)
            return current

        # === TOGGLE ON ===
        if len(days) >= interval:
            const.LOGGER.debug(
                "PatternEngine: Refusing to select %s, selection at capacity %d",
                day,
                interval,
            )
            return PatternEngine._refused(current)
        days.append(day)
        current.changes.append(const.DATA_PATTERN_DAYS_OF_WEEK)
        return current

    @staticmethod
    def _on_interval_changed(
        current: PatternUpdate, edit: IntervalChanged, today: date
    ) -> PatternUpdate:
        """Change the interval and shrink the weekly selection to fit."""
        pattern = current.pattern
        if pattern is None:
            const.LOGGER.debug("PatternEngine: Interval change on non-recurring task")
            return PatternEngine._refused(current)

        interval = PatternEngine._coerce_interval(edit.interval)
        pattern[const.DATA_PATTERN_INTERVAL] = interval
        current.changes.append(const.DATA_PATTERN_INTERVAL)

        if current.recurrence != const.FREQUENCY_WEEKLY:
            return current

        days: list[str] = pattern[const.DATA_PATTERN_DAYS_OF_WEEK]
        if len(days) > interval:
            pattern[const.DATA_PATTERN_DAYS_OF_WEEK] = days[:interval]
            current.changes.append(const.DATA_PATTERN_DAYS_OF_WEEK)
            PatternEngine._relocate_if_unpinned(current, today)
        elif not days:
            due = dt_parse_date(current.due_date)
            if due is not None:
                pattern[const.DATA_PATTERN_DAYS_OF_WEEK] = [weekday_name(due)]
                current.changes.append(const.DATA_PATTERN_DAYS_OF_WEEK)
        return current

    @staticmethod
    def _on_recurrence_changed(
        current: PatternUpdate, edit: RecurrenceChanged
    ) -> PatternUpdate:
        """Switch frequency, creating or dropping the pattern as needed."""
        frequency = edit.frequency
        if frequency == const.FREQUENCY_NONE:
            frequency = None
        if frequency is not None and frequency not in const.RECURRING_FREQUENCIES:
            const.LOGGER.debug("PatternEngine: Unknown frequency %s", frequency)
            return PatternEngine._refused(current)

        if frequency == current.recurrence:
            return PatternEngine._refused(current)

        current.recurrence = frequency
        current.pattern = build_recurrence_pattern(
            dict(current.pattern) if current.pattern else None,
            recurrence=frequency,
            due_date=current.due_date,
        )
        current.changes.append(const.DATA_TASK_RECURRENCE)
        return current

    @staticmethod
    def _on_end_date_changed(
        current: PatternUpdate, edit: EndDateChanged
    ) -> PatternUpdate:
        """Set or clear the end date of the series."""
        pattern = current.pattern
        if pattern is None:
            return PatternEngine._refused(current)

        end_date = dt_parse_date(edit.end_date) if edit.end_date else None
        if edit.end_date and end_date is None:
            const.LOGGER.debug(
                "PatternEngine: Ignoring unparseable end date %s", edit.end_date
            )
            return PatternEngine._refused(current)

        pattern[const.DATA_PATTERN_END_DATE] = (
            end_date.isoformat() if end_date else None
        )
        current.changes.append(const.DATA_PATTERN_END_DATE)
        return current

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _relocate_if_unpinned(current: PatternUpdate, today: date) -> None:
        """Move the due date when its weekday is no longer selected.

        The new due date is the nearest date after today falling on the first
        remaining selected weekday, so the picker shows an upcoming date.
        """
        pattern = current.pattern
        if pattern is None:
            return
        days = pattern[const.DATA_PATTERN_DAYS_OF_WEEK]
        due = dt_parse_date(current.due_date)
        if not days or (due is not None and weekday_name(due) in days):
            return

        relocated = dt_next_weekday(days[0], today)
        if relocated is None:
            return
        const.LOGGER.debug(
            "PatternEngine: Relocating due date %s → %s (%s)",
            current.due_date,
            relocated.isoformat(),
            days[0],
        )
        current.due_date = relocated.isoformat()
        current.relocated = True
        current.changes.append(const.DATA_TASK_DUE_DATE)

    @staticmethod
    def _coerce_interval(value: Any) -> int:
        """Coerce user input to an interval >= 1 (invalid input becomes 1)."""
        try:
            interval = int(value)
        except (TypeError, ValueError):
            return const.DEFAULT_INTERVAL
        return max(const.DEFAULT_INTERVAL, interval)

    @staticmethod
    def _current_state(task: TaskData) -> PatternUpdate:
        """Snapshot the editable triple, copying the mutable pattern parts."""
        pattern = task.get(const.DATA_TASK_RECURRENCE_PATTERN)
        copied: RecurrencePatternData | None = None
        if pattern is not None:
            copied = dict(pattern)  # type: ignore[assignment]
            copied[const.DATA_PATTERN_DAYS_OF_WEEK] = list(
                pattern.get(const.DATA_PATTERN_DAYS_OF_WEEK) or []
            )
            copied.setdefault(const.DATA_PATTERN_INTERVAL, const.DEFAULT_INTERVAL)
        return PatternUpdate(
            due_date=task.get(const.DATA_TASK_DUE_DATE, ""),
            recurrence=task.get(const.DATA_TASK_RECURRENCE),
            pattern=copied,
        )

    @staticmethod
    def _refused(current: PatternUpdate) -> PatternUpdate:
        """Mark an update as refused (no-op)."""
        current.applied = False
        current.relocated = False
        current.changes.clear()
        return current


# =============================================================================
# ENTRY POINTS
# =============================================================================


def validate_pattern_on_due_date_change(
    task: TaskData,
    new_due_date: date | str,
    today: date | datetime | None = None,
) -> PatternUpdate:
    """Reconcile the pattern after the due date changed."""
    return PatternEngine.reconcile(task, DueDateChanged(new_due_date), today)


def validate_pattern_on_weekday_toggle(
    task: TaskData,
    day: str,
    today: date | datetime | None = None,
) -> PatternUpdate:
    """Reconcile the pattern after a weekday was toggled (may be refused)."""
    return PatternEngine.reconcile(task, WeekdayToggled(day), today)


def validate_pattern_on_interval_change(
    task: TaskData,
    new_interval: Any,
    today: date | datetime | None = None,
) -> PatternUpdate:
    """Reconcile the pattern after the interval changed."""
    return PatternEngine.reconcile(task, IntervalChanged(new_interval), today)
