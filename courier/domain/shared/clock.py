"""Injected time source.

Everything that stamps or compares instants (publication dates, completion
dates, age cutoffs) asks a Clock instead of reading the wall clock directly.
"""

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant (timezone-aware, UTC)."""

    def now(self) -> datetime: ...


class SystemClock:
    """Clock backed by the system wall clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)
