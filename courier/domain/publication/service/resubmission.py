"""Resubmission engine - single-target replay of incomplete publications."""

import logging
from datetime import timedelta
from typing import Callable

import logfire

from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.model.registry import HandlerRegistry
from courier.domain.publication.model.report import ResubmissionReport
from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.error import PayloadUnresolvableError
from courier.domain.shared.service import Service

logger = logging.getLogger(__name__)

RecordPredicate = Callable[[PublicationRecord], bool]


def _always(_: PublicationRecord) -> bool:
    return True


class ResubmissionEngine(Service):
    """Replays incomplete publications to the one handler each belongs to.

    A resubmission never re-fans-out an occurrence: every selected record
    is delivered to its own handler only. Failed replays leave the record
    pending for the next sweep; the engine does not retry on its own.
    """

    _ledger: Ledger
    _registry: HandlerRegistry

    async def resubmit(self, predicate: RecordPredicate | None = None) -> ResubmissionReport:
        """Replay every incomplete publication the predicate selects.

        Args:
            predicate: Filter on records; all incomplete records when omitted.

        Returns:
            Counts of attempted, succeeded, failed and skipped records.

        Raises:
            StoreUnavailableError: If the incomplete records cannot be read.
        """
        with logfire.span("ResubmitIncompletePublications"):
            records = await self._ledger.find_incomplete()
            return await self._replay_all(records, predicate or _always)

    async def resubmit_older_than(
        self, age: timedelta, predicate: RecordPredicate | None = None
    ) -> ResubmissionReport:
        """Like resubmit(), restricted to publications older than ``age``."""
        with logfire.span("ResubmitIncompletePublications", older_than=str(age)):
            records = await self._ledger.find_incomplete_older_than(age)
            return await self._replay_all(records, predicate or _always)

    async def _replay_all(
        self, records: list[PublicationRecord], predicate: RecordPredicate
    ) -> ResubmissionReport:
        attempted = succeeded = failed = skipped = 0

        for record in records:
            if not predicate(record):
                continue

            outcome = await self._replay(record)
            if outcome is None:
                skipped += 1
                continue
            attempted += 1
            if outcome:
                succeeded += 1
            else:
                failed += 1

        report = ResubmissionReport(
            attempted=attempted, succeeded=succeeded, failed=failed, skipped=skipped
        )
        if report.selected:
            logger.info(f"Resubmission sweep finished: {report}")
            logfire.info(
                "Resubmission sweep finished",
                attempted=attempted,
                succeeded=succeeded,
                failed=failed,
                skipped=skipped,
            )
        return report

    async def _replay(self, record: PublicationRecord) -> bool | None:
        """Replay a single record.

        Returns:
            True on success, False on handler or completion failure, None if
            the record could not be replayed at all.
        """
        try:
            occurrence = record.occurrence.resolve()
        except PayloadUnresolvableError as e:
            logger.warning(f"Skipping publication {record.id}: {e.message}")
            return None

        handler = self._registry.get(record.handler_id)
        if handler is None:
            logger.warning(
                f"Skipping publication {record.id}: handler '{record.handler_id}' "
                "is not registered"
            )
            return None

        try:
            await handler.invoke(occurrence)
        except Exception as e:
            logger.error(
                f"Replay of publication {record.id} to '{record.handler_id}' failed: {e}"
            )
            return False

        try:
            await self._ledger.complete(record.id)
        except Exception as e:
            logger.error(
                f"Replay of publication {record.id} succeeded but completion failed: {e}"
            )
            return False

        logger.debug(f"Replayed publication {record.id} to '{record.handler_id}'")
        return True
