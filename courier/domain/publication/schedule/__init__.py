"""Publication sweeps run on a schedule."""

from courier.domain.publication.schedule.prune_schedule import PruneSchedule
from courier.domain.publication.schedule.resubmit_schedule import ResubmitSchedule

__all__ = ["PruneSchedule", "ResubmitSchedule"]
