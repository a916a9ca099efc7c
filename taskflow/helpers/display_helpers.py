"""Display helpers for TaskFlow.

Read-only text shaping for task lists. Nothing here feeds back into the
engines.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..utils.dt_utils import dt_parse_date

if TYPE_CHECKING:
    from ..type_defs import TaskData


def day_suffix(day: int) -> str:
    """Return the English ordinal suffix for a day of month (1st, 2nd, 11th)."""
    if 3 < day < 21:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _every(interval: int, recurrence: str) -> str:
    if interval == 1:
        return recurrence.capitalize()
    return f"Every {interval} {const.TIME_UNIT_LABELS[recurrence]}"


def format_recurrence_label(task: TaskData) -> str:
    """Build the human-readable recurrence rule of a task.

    Examples:
        daily, interval 1            → "Daily"
        daily, interval 3            → "Every 3 days"
        weekly, [Monday, Thursday]   → "Weekly on Mon, Thu"
        weekly, interval 2, [Monday] → "Every 2 weeks on Mon"
        monthly, day 31              → "Monthly on the 31st"
        yearly, month 0, day 5       → "Yearly on January 5th"
        + end date 2025-06-30        → "... until 6/30/2025"
    """
    recurrence = task.get(const.DATA_TASK_RECURRENCE)
    if not recurrence:
        return const.DISPLAY_DOES_NOT_REPEAT

    pattern = task.get(const.DATA_TASK_RECURRENCE_PATTERN) or {}
    interval = pattern.get(const.DATA_PATTERN_INTERVAL) or const.DEFAULT_INTERVAL
    day_of_month = pattern.get(const.DATA_PATTERN_DAY_OF_MONTH)

    if recurrence == const.FREQUENCY_DAILY:
        text = _every(interval, recurrence)

    elif recurrence == const.FREQUENCY_WEEKLY:
        text = _every(interval, recurrence)
        days = pattern.get(const.DATA_PATTERN_DAYS_OF_WEEK) or []
        if days:
            text += " on " + ", ".join(day[:3] for day in days)

    elif recurrence == const.FREQUENCY_MONTHLY:
        text = _every(interval, recurrence)
        if day_of_month:
            text += f" on the {day_of_month}{day_suffix(day_of_month)}"

    elif recurrence == const.FREQUENCY_YEARLY:
        text = _every(interval, recurrence)
        if day_of_month:
            month_index = pattern.get(const.DATA_PATTERN_MONTH_OF_YEAR) or 0
            month = const.MONTH_NAMES[month_index]
            text += f" on {month} {day_of_month}{day_suffix(day_of_month)}"

    else:
        text = str(recurrence)

    end_date = dt_parse_date(pattern.get(const.DATA_PATTERN_END_DATE))
    if end_date:
        text += f" until {end_date.month}/{end_date.day}/{end_date.year}"

    return text
