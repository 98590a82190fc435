"""Base class for scheduled sweeps."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class Schedule(ABC):
    """Base class for scheduled tasks.

    Subclasses are dataclasses with DI-injected dependencies. The cron
    expression and run parameters come from config, not from the class.

    Example:
        @dataclass
        class PruneSchedule(Schedule):
            ledger: Ledger

            async def run(self, completed_older_than_seconds: float) -> None:
                await self.ledger.prune(timedelta(seconds=completed_older_than_seconds))
    """

    @abstractmethod
    async def run(self, **params: Any) -> None:
        """Run the scheduled task with parameters from config."""
        ...
