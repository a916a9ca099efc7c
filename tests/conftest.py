"""Shared fixtures for TaskFlow tests."""

from collections.abc import Iterator
from datetime import UTC, datetime
import logging

import pytest

from taskflow import const
from taskflow.utils import dt_utils
from tests.helpers import FakeClock


@pytest.fixture(autouse=True)
def reset_default_timezone() -> Iterator[None]:
    """Restore the UTC default zone after every test.

    dt_utils tests change the module-level default zone.
    """
    dt_utils.set_default_timezone(const.DEFAULT_TIME_ZONE_NAME)
    yield
    dt_utils.set_default_timezone(const.DEFAULT_TIME_ZONE_NAME)


@pytest.fixture
def taskflow_debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture TaskFlow package logs at DEBUG level."""
    caplog.set_level(logging.DEBUG, logger=const.LOGGER.name)
    return caplog


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock frozen at Monday 2025-04-07 12:00 UTC."""
    return FakeClock(datetime(2025, 4, 7, 12, 0, tzinfo=UTC))
