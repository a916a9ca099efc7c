"""Task structure builders.

This module is the SINGLE SOURCE OF TRUTH for:
- Task field defaults
- Complete task structure building (ids, timestamps, links)
- Recurrence pattern normalization (weekly capacity and pinned weekday)
- Checklist item building and regeneration

Build functions take loosely-typed input, run it through the voluptuous
schemas in schemas.py and return a complete dict ready for the collection.
Schema failures surface as EntityValidationError with the offending field.

Consumers:
- managers/task_manager.py (create/load/edit)
- engines/pattern_engine.py (default patterns, weekday fitting)
- engines/task_engine.py (next-instance checklist regeneration)
"""

from __future__ import annotations

from datetime import date
from typing import Any, NoReturn, cast
import uuid

import voluptuous as vol

from . import const
from .schemas import CHECKLIST_ITEM_SCHEMA, RECURRENCE_PATTERN_SCHEMA, TASK_SCHEMA
from .type_defs import (
    ChecklistItemData,
    RecurrencePatternData,
    TaskData,
    WeekdayName,
)
from .utils.dt_utils import dt_now_iso, dt_parse_date, weekday_name

# ==============================================================================
# EXCEPTIONS
# ==============================================================================


class EntityValidationError(Exception):
    """Validation error with field-specific information for form highlighting.

    Attributes:
        field: The DATA_* key of the field that failed
        translation_key: The TRANS_KEY_* constant for the error message
        placeholders: Optional dict for translation string placeholders

    Example:
        raise EntityValidationError(
            field=const.DATA_TASK_TITLE,
            translation_key=const.TRANS_KEY_ERROR_INVALID_TITLE,
        )
    """

    def __init__(
        self,
        field: str,
        translation_key: str,
        placeholders: dict[str, str] | None = None,
    ) -> None:
        """Initialize EntityValidationError."""
        self.field = field
        self.translation_key = translation_key
        self.placeholders = placeholders or {}
        super().__init__(translation_key)


def _raise_from_invalid(err: vol.Invalid, prefix: str | None = None) -> NoReturn:
    """Translate a voluptuous error into EntityValidationError."""
    path = [str(part) for part in err.path]
    if prefix:
        path.insert(0, prefix)
    field = path[0] if path else const.DATA_TASK_ID
    translation_key = (
        const.TRANS_KEY_ERROR_INVALID_TITLE
        if field == const.DATA_TASK_TITLE
        else const.TRANS_KEY_ERROR_INVALID_TASK
    )
    raise EntityValidationError(
        field=field,
        translation_key=translation_key,
        placeholders={"path": ".".join(path), "error": err.msg},
    ) from err


# ==============================================================================
# CHECKLIST
# ==============================================================================


def build_checklist_item(
    text: str,
    checked: bool = False,
    item_id: str | None = None,
) -> ChecklistItemData:
    """Build a checklist item with a fresh id unless one is given.

    Raises:
        EntityValidationError: If the text is empty
    """
    raw: dict[str, Any] = {
        const.DATA_CHECKLIST_ITEM_TEXT: text,
        const.DATA_CHECKLIST_ITEM_CHECKED: checked,
    }
    try:
        data = CHECKLIST_ITEM_SCHEMA(raw)
    except vol.Invalid as err:
        _raise_from_invalid(err, prefix=const.DATA_TASK_CHECKLIST)

    return {
        const.DATA_CHECKLIST_ITEM_ID: item_id or str(uuid.uuid4()),
        const.DATA_CHECKLIST_ITEM_TEXT: data[const.DATA_CHECKLIST_ITEM_TEXT],
        const.DATA_CHECKLIST_ITEM_CHECKED: data[const.DATA_CHECKLIST_ITEM_CHECKED],
    }


def regenerate_checklist(
    checklist: list[ChecklistItemData] | None,
) -> list[ChecklistItemData]:
    """Copy checklist content for a new task instance.

    Every item gets a fresh id and is unchecked; ids are never shared
    between instances of a series.
    """
    return [
        {
            const.DATA_CHECKLIST_ITEM_ID: str(uuid.uuid4()),
            const.DATA_CHECKLIST_ITEM_TEXT: item.get(const.DATA_CHECKLIST_ITEM_TEXT, ""),
            const.DATA_CHECKLIST_ITEM_CHECKED: False,
        }
        for item in checklist or []
    ]


def _normalize_checklist(items: list[dict[str, Any]]) -> list[ChecklistItemData]:
    """Assign ids to items missing one and replace duplicated ids."""
    seen: set[str] = set()
    result: list[ChecklistItemData] = []
    for item in items:
        item_id = item.get(const.DATA_CHECKLIST_ITEM_ID)
        if not item_id or item_id in seen:
            item_id = str(uuid.uuid4())
        seen.add(item_id)
        result.append(
            {
                const.DATA_CHECKLIST_ITEM_ID: item_id,
                const.DATA_CHECKLIST_ITEM_TEXT: item[const.DATA_CHECKLIST_ITEM_TEXT],
                const.DATA_CHECKLIST_ITEM_CHECKED: item[
                    const.DATA_CHECKLIST_ITEM_CHECKED
                ],
            }
        )
    return result


# ==============================================================================
# RECURRENCE PATTERN
# ==============================================================================


def fit_days_to_capacity(
    days: list[WeekdayName],
    pinned_day: WeekdayName | None,
    capacity: int,
) -> list[WeekdayName]:
    """Fit a weekly selection to its capacity while keeping the pinned day.

    The pinned day is appended when missing, then the least recently
    selected days (front of the list) are evicted until the selection fits.
    The pinned day itself is never evicted.

    Examples:
        (["Monday"], "Friday", 1) → ["Friday"]
        (["Monday"], "Friday", 2) → ["Monday", "Friday"]
        (["Monday", "Tuesday"], "Friday", 2) → ["Tuesday", "Friday"]
    """
    result = list(days)
    if pinned_day and pinned_day not in result:
        result.append(pinned_day)

    capacity = max(1, capacity)
    while len(result) > capacity:
        evictable = [day for day in result if day != pinned_day]
        if not evictable:
            break
        result.remove(evictable[0])

    return result


def build_recurrence_pattern(
    user_input: dict[str, Any] | None,
    *,
    recurrence: str | None,
    due_date: str | date,
) -> RecurrencePatternData | None:
    """Build a complete recurrence pattern for a task.

    Returns None for non-recurring tasks so the pattern exists iff the
    recurrence does. Weekly selections are seeded with (and fitted around)
    the due date's weekday.

    Raises:
        EntityValidationError: If a pattern field is out of range
    """
    if recurrence is None:
        return None

    try:
        data = RECURRENCE_PATTERN_SCHEMA(dict(user_input or {}))
    except vol.Invalid as err:
        _raise_from_invalid(err, prefix=const.DATA_TASK_RECURRENCE_PATTERN)

    days: list[WeekdayName] = data[const.DATA_PATTERN_DAYS_OF_WEEK]
    if recurrence == const.FREQUENCY_WEEKLY:
        due = dt_parse_date(due_date)
        pinned = weekday_name(due) if due else None
        days = fit_days_to_capacity(
            days, pinned, data[const.DATA_PATTERN_INTERVAL]
        )

    return {
        const.DATA_PATTERN_INTERVAL: data[const.DATA_PATTERN_INTERVAL],
        const.DATA_PATTERN_DAYS_OF_WEEK: days,
        const.DATA_PATTERN_DAY_OF_MONTH: data[const.DATA_PATTERN_DAY_OF_MONTH],
        const.DATA_PATTERN_MONTH_OF_YEAR: data[const.DATA_PATTERN_MONTH_OF_YEAR],
        const.DATA_PATTERN_END_DATE: data[const.DATA_PATTERN_END_DATE],
    }


# ==============================================================================
# TASK
# ==============================================================================


def build_task(user_input: dict[str, Any]) -> TaskData:
    """Build a complete task from caller input.

    Used both for new tasks and for normalizing tasks loaded by the store.
    Fields the caller supplies win; everything else gets a default:
    - id: fresh uuid4
    - created_at: now (local, ISO)
    - series_id: the task's own id (a new series)
    - recurrence_pattern: built/normalized from recurrence and due_date

    Raises:
        EntityValidationError: If a field fails schema validation

    Examples:
        task = build_task({"title": "Standup", "due_date": "2025-04-07"})

        task = build_task({
            "title": "Report",
            "due_date": "2025-04-11",
            "recurrence": "weekly",
            "recurrence_pattern": {"interval": 1},
        })  # days_of_week → ["Friday"]
    """
    try:
        data = TASK_SCHEMA(dict(user_input))
    except vol.Invalid as err:
        _raise_from_invalid(err)

    task_id = data.get(const.DATA_TASK_ID) or str(uuid.uuid4())
    recurrence = data[const.DATA_TASK_RECURRENCE]
    due_date = data[const.DATA_TASK_DUE_DATE]

    return cast(
        "TaskData",
        {
            const.DATA_TASK_ID: task_id,
            const.DATA_TASK_TITLE: data[const.DATA_TASK_TITLE],
            const.DATA_TASK_DESCRIPTION: data[const.DATA_TASK_DESCRIPTION],
            const.DATA_TASK_PRIORITY: data[const.DATA_TASK_PRIORITY],
            const.DATA_TASK_CATEGORY: data[const.DATA_TASK_CATEGORY],
            const.DATA_TASK_DUE_DATE: due_date,
            const.DATA_TASK_COMPLETED: data[const.DATA_TASK_COMPLETED],
            const.DATA_TASK_RECURRENCE: recurrence,
            const.DATA_TASK_RECURRENCE_PATTERN: build_recurrence_pattern(
                data[const.DATA_TASK_RECURRENCE_PATTERN],
                recurrence=recurrence,
                due_date=due_date,
            ),
            const.DATA_TASK_CHECKLIST: _normalize_checklist(
                data[const.DATA_TASK_CHECKLIST]
            ),
            const.DATA_TASK_CREATED_AT: data.get(const.DATA_TASK_CREATED_AT)
            or dt_now_iso(),
            const.DATA_TASK_SERIES_ID: data.get(const.DATA_TASK_SERIES_ID) or task_id,
            const.DATA_TASK_PREDECESSOR_ID: data[const.DATA_TASK_PREDECESSOR_ID],
        },
    )
