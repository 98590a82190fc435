from dataclasses import dataclass
from datetime import timedelta

from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.model.report import ResubmissionReport
from courier.domain.publication.service.resubmission import ResubmissionEngine
from courier.domain.shared.schedule import Schedule


@dataclass
class ResubmitSchedule(Schedule):
    """Periodic resubmission of stragglers.

    Only touches publications older than ``older_than_seconds`` so that
    dispatches still in flight are left alone.
    """

    engine: ResubmissionEngine

    async def run(
        self,
        older_than_seconds: float = 0.0,
        handler_ids: list[str] | None = None,
    ) -> ResubmissionReport:
        predicate = None
        if handler_ids:
            wanted = set(handler_ids)

            def predicate(record: PublicationRecord) -> bool:
                return record.handler_id in wanted

        if older_than_seconds > 0:
            return await self.engine.resubmit_older_than(
                timedelta(seconds=older_than_seconds), predicate
            )
        return await self.engine.resubmit(predicate)
