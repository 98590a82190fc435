"""Ledger - domain service recording fan-out publications and their completion."""

import logging
from collections import Counter
from datetime import timedelta
from typing import Sequence

from courier.domain.publication.model.payload import SerializedOccurrence
from courier.domain.publication.model.record import (
    PublicationRecord,
    RecordId,
    new_record_id,
)
from courier.domain.publication.port.store import PublicationStore
from courier.domain.shared.clock import Clock
from courier.domain.shared.error import (
    AmbiguousPublicationError,
    UnknownRecordError,
    ValidationError,
)
from courier.domain.shared.occurrence import Occurrence
from courier.domain.shared.service import Service

logger = logging.getLogger(__name__)


class Ledger(Service):
    """Orchestrates the publication store for dispatchers and sweeps.

    On record(), creates one pending publication per interested handler and
    writes them as a single atomic batch. Each handler invocation is then
    confirmed independently with complete(), correlated by the record id
    that record() returned.
    """

    _store: PublicationStore
    _clock: Clock

    async def record(
        self, occurrence: Occurrence, handler_ids: Sequence[str]
    ) -> list[PublicationRecord]:
        """Record one fan-out of an occurrence.

        Args:
            occurrence: The occurrence being published.
            handler_ids: Ids of every handler interested in it.

        Returns:
            The created records, one per handler id, in the given order.

        Raises:
            ValidationError: If a handler id appears more than once.
            StoreUnavailableError: If the store rejected the batch. Nothing
                was recorded for any handler.
        """
        duplicates = [h for h, n in Counter(handler_ids).items() if n > 1]
        if duplicates:
            raise ValidationError(
                f"Handler ids must be unique per publication: {duplicates}",
                field="handler_ids",
            )
        if not handler_ids:
            return []

        serialized = SerializedOccurrence.of(occurrence)
        published_at = self._clock.now()
        records = [
            PublicationRecord(
                id=new_record_id(),
                handler_id=handler_id,
                occurrence=serialized,
                published_at=published_at,
            )
            for handler_id in handler_ids
        ]
        await self._store.insert(records)
        logger.debug(
            f"Recorded {serialized.occurrence_type} for {len(records)} handlers"
        )
        return records

    async def complete(self, record_id: RecordId) -> bool:
        """Mark a publication as completed. Idempotent.

        Returns:
            True if this call completed the record, False if it was already
            completed or unknown.
        """
        return await self._store.complete(record_id)

    async def complete_matching(self, occurrence: Occurrence, handler_id: str) -> bool:
        """Complete the pending publication of ``occurrence`` for ``handler_id``.

        Compatibility path for callers that did not keep the record id. The
        lookup goes through the occurrence fingerprint, so two structurally
        equal occurrences in flight at the same time cannot be told apart;
        that case is refused rather than guessed.

        Raises:
            AmbiguousPublicationError: If several pending records match.
        """
        fingerprint = SerializedOccurrence.of(occurrence).fingerprint
        matches = await self._store.find_incomplete_by_fingerprint(fingerprint, handler_id)

        if not matches:
            logger.warning(
                f"No pending publication of {type(occurrence).type_name()} "
                f"for handler '{handler_id}'"
            )
            return False
        if len(matches) > 1:
            raise AmbiguousPublicationError(handler_id, fingerprint, len(matches))

        return await self._store.complete(matches[0].id)

    async def get(self, record_id: RecordId) -> PublicationRecord | None:
        return await self._store.get(record_id)

    async def require(self, record_id: RecordId) -> PublicationRecord:
        record = await self._store.get(record_id)
        if record is None:
            raise UnknownRecordError(record_id)
        return record

    async def find_incomplete(self) -> list[PublicationRecord]:
        return await self._store.find_incomplete()

    async def find_incomplete_older_than(self, age: timedelta) -> list[PublicationRecord]:
        return await self._store.find_incomplete_older_than(age)

    async def prune(self, age: timedelta) -> int:
        """Delete completed publications older than ``age``."""
        count = await self._store.delete_completed_older_than(age)
        if count:
            logger.info(f"Pruned {count} completed publications older than {age}")
        return count
