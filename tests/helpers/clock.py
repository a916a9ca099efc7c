"""Settable clock for TaskManager tests."""

from __future__ import annotations

from datetime import UTC, datetime


class FakeClock:
    """Callable clock returning a fixed, movable instant."""

    def __init__(self, now: datetime) -> None:
        """Initialize the clock at a fixed instant."""
        self.now = now
        self.calls = 0

    def __call__(self) -> datetime:
        """Return the current instant."""
        self.calls += 1
        return self.now

    def set(self, year: int, month: int, day: int, hour: int = 12) -> None:
        """Move the clock to noon (or the given hour) UTC of a day."""
        self.now = datetime(year, month, day, hour, 0, tzinfo=UTC)
