"""Schedule Engine for TaskFlow.

Next-occurrence calculation for recurring tasks:
- `dateutil.relativedelta` (via dt_utils.dt_add_interval) for month/year
  clamping (Jan 31 + 1 month = Feb 28)
- Day-of-month and month-of-year pins, clamped to the target month
- Weekly weekday selections (walk forward to the next selected day)
- Optional series end date and a fixed iteration cap

IMPORTANT: This module must NOT import from managers to avoid circular imports.
Only import from const.py, type_defs.py and utils.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, ClassVar

from .. import const
from ..utils.dt_utils import (
    dt_add_interval,
    dt_parse_date,
    dt_to_local_date,
    dt_today_local,
    dt_with_day_clamped,
    dt_with_month_clamped,
    weekday_name,
)

if TYPE_CHECKING:
    from ..type_defs import TaskData


class RecurrenceEngine:
    """Next-occurrence calculator for one task's recurrence.

    Handles DAILY, WEEKLY, MONTHLY and YEARLY with an interval, plus the
    pattern pins (days_of_week, day_of_month, month_of_year) and end_date.

    The search starts from the due date, or from the present when the due
    date is already behind: fixed-length units (days, weeks) are
    fast-forwarded mathematically; months and years are iterated so that
    clamping stays cumulative, bounded by max_iterations.
    """

    # Frequencies with a fixed length in days (can be fast-forwarded)
    FIXED_LENGTH_DAYS: ClassVar[dict[str, int]] = {
        const.FREQUENCY_DAILY: 1,
        const.FREQUENCY_WEEKLY: const.DAYS_PER_WEEK,
    }

    def __init__(
        self,
        task: TaskData,
        max_iterations: int = const.MAX_OCCURRENCE_SEARCH_ITERATIONS,
    ) -> None:
        """Initialize the recurrence engine from a task.

        Args:
            task: Task dict holding due_date, recurrence and recurrence_pattern.
            max_iterations: Safety cap on advance steps per search.

        Note:
            Invalid interval values (<=0) are coerced to 1.
            Unknown weekday names in days_of_week are dropped.
        """
        self._frequency: str | None = task.get(const.DATA_TASK_RECURRENCE)
        self._pattern = task.get(const.DATA_TASK_RECURRENCE_PATTERN)
        self._due_date: date | None = dt_parse_date(task.get(const.DATA_TASK_DUE_DATE))
        self._max_iterations = max(1, max_iterations)

        pattern = self._pattern or {}
        interval = pattern.get(const.DATA_PATTERN_INTERVAL, const.DEFAULT_INTERVAL)
        self._interval = interval if isinstance(interval, int) and interval > 0 else 1

        self._days_of_week: list[str] = [
            day
            for day in pattern.get(const.DATA_PATTERN_DAYS_OF_WEEK) or []
            if day in const.WEEKDAY_NAMES
        ]
        self._day_of_month: int | None = pattern.get(const.DATA_PATTERN_DAY_OF_MONTH)
        self._month_of_year: int | None = pattern.get(const.DATA_PATTERN_MONTH_OF_YEAR)
        self._end_date: date | None = dt_parse_date(
            pattern.get(const.DATA_PATTERN_END_DATE)
        )

    def get_next_occurrence(
        self, reference: date | datetime | None = None
    ) -> date | None:
        """Calculate the next occurrence strictly after the reference date.

        Args:
            reference: "Now" (date or datetime). Datetimes are reduced to the
                local calendar date. If None, uses today.

        Returns:
            Next occurrence date, or None when the task does not recur, the
            series has ended, or the search hit the iteration cap.
        """
        if not self._frequency or self._pattern is None:
            const.LOGGER.debug("RecurrenceEngine: Task does not recur")
            return None

        if self._frequency not in const.FREQUENCY_TO_TIME_UNIT:
            const.LOGGER.warning(
                "RecurrenceEngine: Unknown recurrence frequency: %s", self._frequency
            )
            return None

        if self._due_date is None:
            const.LOGGER.debug("RecurrenceEngine: No due date, cannot calculate")
            return None

        today = dt_to_local_date(reference) if reference is not None else None
        today = today or dt_today_local()

        # Series exhausted
        if self._end_date and today > self._end_date:
            const.LOGGER.debug(
                "RecurrenceEngine: Series ended on %s", self._end_date.isoformat()
            )
            return None

        candidate = self._due_date
        if today >= candidate:
            candidate = self._fast_forward(candidate, today)

        iteration = 0
        while iteration < self._max_iterations:
            iteration += 1
            advanced = self._advance(candidate)
            if advanced is None:
                return None
            candidate = advanced

            if self._end_date and candidate > self._end_date:
                const.LOGGER.debug(
                    "RecurrenceEngine: Next candidate %s is past end date %s",
                    candidate.isoformat(),
                    self._end_date.isoformat(),
                )
                return None

            if candidate > today:
                break
        else:
            const.LOGGER.warning(
                "RecurrenceEngine: Max iterations (%d) reached for %s",
                self._max_iterations,
                self._frequency,
            )
            return None

        # Accept only dates strictly in the future
        if candidate <= today:
            return None
        return candidate

    def preview_occurrences(
        self, reference: date | datetime | None = None, count: int = 5
    ) -> list[date]:
        """List the next `count` occurrences after the reference date.

        Each step treats the previous result as the due date of a
        hypothetical successor, mirroring what repeated completions produce.
        """
        occurrences: list[date] = []
        engine: RecurrenceEngine = self
        current_reference = reference

        for _ in range(max(0, count)):
            next_date = engine.get_next_occurrence(current_reference)
            if next_date is None:
                break
            occurrences.append(next_date)
            engine = engine._with_due_date(next_date)
            current_reference = next_date

        return occurrences

    # =========================================================================
    # Private: advancing
    # =========================================================================

    def _advance(self, candidate: date) -> date | None:
        """Advance a candidate by one recurrence step."""
        unit = const.FREQUENCY_TO_TIME_UNIT[self._frequency]  # type: ignore[index]
        result = dt_add_interval(candidate, unit, self._interval)
        if result is None:
            return None

        if self._frequency == const.FREQUENCY_WEEKLY:
            return self._snap_to_selected_day(result)

        if self._frequency == const.FREQUENCY_YEARLY and self._month_of_year is not None:
            # month_of_year is 0-based (0=January)
            result = dt_with_month_clamped(result, self._month_of_year + 1)

        if (
            self._frequency in (const.FREQUENCY_MONTHLY, const.FREQUENCY_YEARLY)
            and self._day_of_month
        ):
            result = dt_with_day_clamped(result, self._day_of_month)

        return result

    def _snap_to_selected_day(self, candidate: date) -> date:
        """Walk forward (at most a week) to the next selected weekday."""
        if not self._days_of_week:
            return candidate

        steps = 0
        while (
            weekday_name(candidate) not in self._days_of_week
            and steps < const.MAX_WEEKDAY_SNAP_STEPS
        ):
            candidate = candidate + timedelta(days=1)
            steps += 1
        return candidate

    def _fast_forward(self, candidate: date, today: date) -> date:
        """Jump a stale candidate to the last aligned date on or before today.

        Only fixed-length units are jumped; months and years are left to the
        iteration loop so clamping is applied step by step.
        """
        unit_days = self.FIXED_LENGTH_DAYS.get(self._frequency or "")
        if unit_days is None or candidate >= today:
            return candidate

        step_days = unit_days * self._interval
        periods = (today - candidate).days // step_days
        return candidate + timedelta(days=periods * step_days)

    def _with_due_date(self, due_date: date) -> RecurrenceEngine:
        """Return a copy of this engine anchored on another due date."""
        clone = object.__new__(RecurrenceEngine)
        clone.__dict__.update(self.__dict__)
        clone._due_date = due_date
        return clone


def calculate_next_occurrence(
    task: TaskData,
    reference: date | datetime | None = None,
    max_iterations: int = const.MAX_OCCURRENCE_SEARCH_ITERATIONS,
) -> date | None:
    """Calculate the next occurrence date of a task.

    Convenience wrapper around RecurrenceEngine; pure, so calling it twice
    with the same task and reference gives the same answer.

    Args:
        task: Task dict.
        reference: "Now" as a date or datetime. If None, uses today.
        max_iterations: Safety cap on the search loop.

    Returns:
        Next occurrence date, or None if the series does not continue.
    """
    return RecurrenceEngine(task, max_iterations).get_next_occurrence(reference)
