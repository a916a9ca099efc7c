"""Test helpers for TaskFlow tests.

    from tests.helpers import FakeClock, collection, make_task, make_weekly_task

See factories.py for the calendar the suite is written against.
"""

from tests.helpers.clock import FakeClock
from tests.helpers.factories import collection, make_task, make_weekly_task

__all__ = [
    "FakeClock",
    "collection",
    "make_task",
    "make_weekly_task",
]
