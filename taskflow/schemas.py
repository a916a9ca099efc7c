"""Input schemas for tasks, recurrence patterns and manager options.

Callers hand over loosely-typed dicts (form input, loaded JSON). These
voluptuous schemas coerce them into the canonical storage shape before
data_builders assembles the final TaskData.
"""

from __future__ import annotations

from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from . import const
from .utils.dt_utils import dt_parse_date, normalize_weekday

# --- Field Validators ---


def weekday(value: Any) -> str:
    """Validate a weekday label and return its canonical full name."""
    normalized = normalize_weekday(value)
    if normalized is None:
        raise vol.Invalid(f"invalid weekday: {value!r}")
    return normalized


def iso_date(value: Any) -> str:
    """Validate a calendar date and return it as an ISO date string."""
    parsed = dt_parse_date(value)
    if parsed is None:
        raise vol.Invalid(f"invalid date: {value!r}")
    return parsed.isoformat()


def frequency(value: Any) -> str | None:
    """Validate a recurrence frequency; "none" and empty values become None."""
    if value in (None, "", const.FREQUENCY_NONE):
        return None
    if isinstance(value, str) and value.lower() in const.RECURRING_FREQUENCIES:
        return value.lower()
    raise vol.Invalid(f"invalid recurrence: {value!r}")


def time_zone(value: Any) -> str:
    """Validate an IANA time zone name."""
    if not isinstance(value, str) or not value:
        raise vol.Invalid("time zone must be a non-empty string")
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"unknown time zone: {value}") from err
    return value


def unique_weekdays(values: list[str]) -> list[str]:
    """Drop repeated weekdays, keeping first-selection order."""
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


# --- Schemas ---

CHECKLIST_ITEM_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_CHECKLIST_ITEM_ID): vol.Coerce(str),
        vol.Required(const.DATA_CHECKLIST_ITEM_TEXT): vol.All(
            str, vol.Strip, vol.Length(min=1)
        ),
        vol.Optional(const.DATA_CHECKLIST_ITEM_CHECKED, default=False): bool,
    },
    extra=vol.REMOVE_EXTRA,
)

RECURRENCE_PATTERN_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.DATA_PATTERN_INTERVAL, default=const.DEFAULT_INTERVAL
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
        vol.Optional(const.DATA_PATTERN_DAYS_OF_WEEK, default=list): vol.All(
            [weekday], unique_weekdays
        ),
        vol.Optional(const.DATA_PATTERN_DAY_OF_MONTH, default=None): vol.Any(
            None,
            vol.All(
                vol.Coerce(int),
                vol.Range(min=const.DAY_OF_MONTH_MIN, max=const.DAY_OF_MONTH_MAX),
            ),
        ),
        vol.Optional(const.DATA_PATTERN_MONTH_OF_YEAR, default=None): vol.Any(
            None,
            vol.All(
                vol.Coerce(int),
                vol.Range(min=const.MONTH_OF_YEAR_MIN, max=const.MONTH_OF_YEAR_MAX),
            ),
        ),
        vol.Optional(const.DATA_PATTERN_END_DATE, default=None): vol.Any(
            None, iso_date
        ),
    },
    extra=vol.REMOVE_EXTRA,
)

TASK_SCHEMA = vol.Schema(
    {
        vol.Optional(const.DATA_TASK_ID): vol.Coerce(str),
        vol.Required(const.DATA_TASK_TITLE): vol.All(
            str, vol.Strip, vol.Length(min=1)
        ),
        vol.Optional(
            const.DATA_TASK_DESCRIPTION, default=const.DEFAULT_DESCRIPTION
        ): str,
        vol.Optional(const.DATA_TASK_PRIORITY, default=const.DEFAULT_PRIORITY): vol.All(
            str, vol.Lower, vol.In(const.PRIORITY_OPTIONS)
        ),
        vol.Optional(const.DATA_TASK_CATEGORY, default=const.DEFAULT_CATEGORY): vol.All(
            str, vol.Strip
        ),
        vol.Required(const.DATA_TASK_DUE_DATE): iso_date,
        vol.Optional(const.DATA_TASK_COMPLETED, default=False): bool,
        vol.Optional(const.DATA_TASK_RECURRENCE, default=None): frequency,
        vol.Optional(const.DATA_TASK_RECURRENCE_PATTERN, default=None): vol.Any(
            None, RECURRENCE_PATTERN_SCHEMA
        ),
        vol.Optional(const.DATA_TASK_CHECKLIST, default=list): [CHECKLIST_ITEM_SCHEMA],
        vol.Optional(const.DATA_TASK_CREATED_AT): str,
        vol.Optional(const.DATA_TASK_SERIES_ID): vol.Coerce(str),
        vol.Optional(const.DATA_TASK_PREDECESSOR_ID, default=None): vol.Any(
            None, vol.Coerce(str)
        ),
    },
    extra=vol.REMOVE_EXTRA,
)

MANAGER_OPTIONS_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.CONF_TIME_ZONE, default=const.DEFAULT_TIME_ZONE_NAME
        ): time_zone,
        vol.Optional(
            const.CONF_MAX_SEARCH_ITERATIONS,
            default=const.MAX_OCCURRENCE_SEARCH_ITERATIONS,
        ): vol.All(vol.Coerce(int), vol.Range(min=1)),
    }
)
