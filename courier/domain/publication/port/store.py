"""PublicationStore port - persistence contract for publication records."""

from datetime import timedelta
from typing import Protocol, Sequence

from courier.domain.publication.model.record import PublicationRecord, RecordId


class PublicationStore(Protocol):
    """Durable storage of publication records.

    Implementations resolve all contention themselves (row-level updates,
    a store-wide lock for in-memory storage); callers never coordinate
    across records. Infrastructure failures surface as
    StoreUnavailableError on every operation.
    """

    async def insert(self, records: Sequence[PublicationRecord]) -> None:
        """Atomically insert one fan-out batch.

        Either every record of the batch becomes visible or none does.
        Re-inserting a batch that is already stored verbatim is a no-op.

        Raises:
            DuplicateRecordError: If some ids already exist with different
                content, or only part of the batch is already stored.
            StoreUnavailableError: If the store cannot be reached.
        """
        ...

    async def get(self, record_id: RecordId) -> PublicationRecord | None:
        """Get a record by id."""
        ...

    async def find_incomplete(self) -> list[PublicationRecord]:
        """All records with no completion date, oldest publication first."""
        ...

    async def find_incomplete_older_than(self, age: timedelta) -> list[PublicationRecord]:
        """Incomplete records with ``published_at <= now - age``."""
        ...

    async def find_incomplete_by_fingerprint(
        self, fingerprint: str, handler_id: str
    ) -> list[PublicationRecord]:
        """Incomplete records of one handler whose occurrence has this fingerprint."""
        ...

    async def complete(self, record_id: RecordId) -> bool:
        """Set ``completed_at = now`` if the record is still pending.

        Completing an already completed record keeps the first timestamp.
        Completing an unknown id is logged and ignored.

        Returns:
            True if this call completed the record, False if it was a no-op.
        """
        ...

    async def delete_completed_older_than(self, age: timedelta) -> int:
        """Delete completed records with ``completed_at <= now - age``.

        Pending records are never deleted, whatever their age.

        Returns:
            Number of records deleted.
        """
        ...
