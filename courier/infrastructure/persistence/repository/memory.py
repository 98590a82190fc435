"""In-memory PublicationStore for tests and single-process embedding."""

import logging
import threading
from datetime import timedelta
from typing import Iterable, Sequence

from courier.domain.publication.model.record import PublicationRecord, RecordId
from courier.domain.publication.port.store import PublicationStore
from courier.domain.shared.clock import Clock
from courier.domain.shared.error import DuplicateRecordError

logger = logging.getLogger(__name__)


def _same_content(stored: PublicationRecord, given: PublicationRecord) -> bool:
    return (
        stored.handler_id == given.handler_id
        and stored.occurrence == given.occurrence
        and stored.published_at == given.published_at
    )


def _oldest_first(records: Iterable[PublicationRecord]) -> list[PublicationRecord]:
    return sorted(records, key=lambda r: r.published_at)


class InMemoryPublicationStore(PublicationStore):
    """Dict-backed publication store.

    A single lock guards the dict, so every operation (including a whole
    batch insert) is applied atomically with respect to the others, from
    coroutines and threads alike. Nothing survives the process.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._records: dict[RecordId, PublicationRecord] = {}
        self._lock = threading.Lock()

    async def insert(self, records: Sequence[PublicationRecord]) -> None:
        with self._lock:
            existing = [r for r in records if r.id in self._records]
            if existing:
                if len(existing) == len(records) and all(
                    _same_content(self._records[r.id], r) for r in records
                ):
                    logger.debug(f"Batch of {len(records)} publications already stored")
                    return
                raise DuplicateRecordError(
                    f"{len(existing)} of {len(records)} publication ids already exist "
                    "with different content",
                    sorted(str(r.id) for r in existing),
                )

            batch_ids = [r.id for r in records]
            if len(set(batch_ids)) != len(batch_ids):
                raise DuplicateRecordError(
                    "Publication batch contains the same id twice",
                    sorted({str(i) for i in batch_ids if batch_ids.count(i) > 1}),
                )

            self._records.update((r.id, r) for r in records)

    async def get(self, record_id: RecordId) -> PublicationRecord | None:
        with self._lock:
            return self._records.get(record_id)

    async def find_incomplete(self) -> list[PublicationRecord]:
        with self._lock:
            return _oldest_first(r for r in self._records.values() if not r.is_completed)

    async def find_incomplete_older_than(self, age: timedelta) -> list[PublicationRecord]:
        cutoff = self._clock.now() - age
        with self._lock:
            return _oldest_first(
                r
                for r in self._records.values()
                if not r.is_completed and r.published_at <= cutoff
            )

    async def find_incomplete_by_fingerprint(
        self, fingerprint: str, handler_id: str
    ) -> list[PublicationRecord]:
        with self._lock:
            return _oldest_first(
                r
                for r in self._records.values()
                if not r.is_completed
                and r.handler_id == handler_id
                and r.occurrence.fingerprint == fingerprint
            )

    async def complete(self, record_id: RecordId) -> bool:
        now = self._clock.now()
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                logger.warning(f"Completion for unknown publication {record_id} ignored")
                return False
            if record.is_completed:
                logger.debug(f"Publication {record_id} already completed")
                return False
            self._records[record_id] = record.mark_completed(now)
        logger.debug(f"Completed publication {record_id}")
        return True

    async def delete_completed_older_than(self, age: timedelta) -> int:
        cutoff = self._clock.now() - age
        with self._lock:
            doomed = [
                record_id
                for record_id, r in self._records.items()
                if r.completed_at is not None and r.completed_at <= cutoff
            ]
            for record_id in doomed:
                del self._records[record_id]
        return len(doomed)
