from dataclasses import dataclass
from datetime import timedelta

from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.schedule import Schedule


@dataclass
class PruneSchedule(Schedule):
    """Periodic deletion of completed publications."""

    ledger: Ledger

    async def run(self, completed_older_than_seconds: float) -> int:
        return await self.ledger.prune(timedelta(seconds=completed_older_than_seconds))
