"""SQLAlchemy adapter implementing PublicationStore."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any, AsyncIterator, Sequence
from uuid import UUID

from sqlalchemy import Row, delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from courier.domain.publication.model.payload import SerializedOccurrence
from courier.domain.publication.model.record import PublicationRecord, RecordId
from courier.domain.publication.port.store import PublicationStore
from courier.domain.shared.clock import Clock
from courier.domain.shared.error import DuplicateRecordError, StoreUnavailableError
from courier.infrastructure.persistence.tables import publications_table

logger = logging.getLogger(__name__)

_t = publications_table


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything is stored in UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _to_row(record: PublicationRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "handler_id": record.handler_id,
        "occurrence_type": record.occurrence.occurrence_type,
        "occurrence_payload": record.occurrence.payload,
        "fingerprint": record.occurrence.fingerprint,
        "published_at": record.published_at,
        "completed_at": record.completed_at,
    }


def _from_row(row: Row) -> PublicationRecord:
    return PublicationRecord(
        id=RecordId(UUID(row.id)),
        handler_id=row.handler_id,
        occurrence=SerializedOccurrence(
            occurrence_type=row.occurrence_type,
            payload=row.occurrence_payload,
        ),
        published_at=_as_utc(row.published_at),
        completed_at=_as_utc(row.completed_at),
    )


def _same_content(stored: PublicationRecord, given: PublicationRecord) -> bool:
    return (
        stored.handler_id == given.handler_id
        and stored.occurrence == given.occurrence
        and stored.published_at == _as_utc(given.published_at)
    )


class SQLAlchemyPublicationStore(PublicationStore):
    """SQLAlchemy-backed publication store.

    Every operation runs in its own short transaction, so a batch insert is
    all-or-nothing and a completion is a single conditional UPDATE. The
    ledger has no notion of the caller's transactions.

    An engine on a StaticPool (in-memory SQLite) hands every session the
    same connection, so operations on it are serialized.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], clock: Clock) -> None:
        self._session_factory = session_factory
        self._clock = clock
        bind = getattr(session_factory, "kw", {}).get("bind")
        shared = bind is not None and isinstance(bind.sync_engine.pool, StaticPool)
        self._lock = asyncio.Lock() if shared else None

    @asynccontextmanager
    async def _exclusive(self) -> AsyncIterator[None]:
        if self._lock is None:
            yield
            return
        async with self._lock:
            yield

    async def insert(self, records: Sequence[PublicationRecord]) -> None:
        """Insert one fan-out batch in a single transaction."""
        if not records:
            return

        ids = [str(r.id) for r in records]
        try:
            async with self._exclusive(), self._session_factory.begin() as session:
                existing = await self._stored(session, ids)
                if existing:
                    self._check_verbatim_retry(records, existing)
                    logger.debug(f"Batch of {len(records)} publications already stored")
                    return

                await session.execute(insert(_t), [_to_row(r) for r in records])
        except IntegrityError as e:
            # A concurrent writer may have stored the same batch after our check
            existing = await self._read_stored(ids)
            if existing:
                self._check_verbatim_retry(records, existing)
                logger.debug(f"Batch of {len(records)} publications stored concurrently")
                return
            raise DuplicateRecordError(
                f"Publication batch collides with stored records: {e.orig}", ids
            ) from e
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not insert publications: {e}") from e

    async def _stored(self, session: AsyncSession, ids: list[str]) -> dict[str, PublicationRecord]:
        result = await session.execute(select(_t).where(_t.c.id.in_(ids)))
        return {row.id: _from_row(row) for row in result}

    async def _read_stored(self, ids: list[str]) -> dict[str, PublicationRecord]:
        try:
            async with self._exclusive(), self._session_factory() as session:
                return await self._stored(session, ids)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not read publications: {e}") from e

    @staticmethod
    def _check_verbatim_retry(
        records: Sequence[PublicationRecord], existing: dict[str, PublicationRecord]
    ) -> None:
        """Accept a batch that is entirely stored already, reject any other overlap."""
        clashing = [
            str(r.id)
            for r in records
            if str(r.id) not in existing or not _same_content(existing[str(r.id)], r)
        ]
        if clashing:
            raise DuplicateRecordError(
                f"{len(existing)} of {len(records)} publication ids already exist "
                "with different content",
                sorted(existing),
            )

    async def get(self, record_id: RecordId) -> PublicationRecord | None:
        stmt = select(_t).where(_t.c.id == str(record_id))
        rows = await self._fetch(stmt)
        return rows[0] if rows else None

    async def find_incomplete(self) -> list[PublicationRecord]:
        stmt = select(_t).where(_t.c.completed_at.is_(None)).order_by(_t.c.published_at)
        return await self._fetch(stmt)

    async def find_incomplete_older_than(self, age: timedelta) -> list[PublicationRecord]:
        cutoff = self._clock.now() - age
        stmt = select(_t).where(
            _t.c.completed_at.is_(None),
            _t.c.published_at <= cutoff,
        ).order_by(_t.c.published_at)
        return await self._fetch(stmt)

    async def find_incomplete_by_fingerprint(
        self, fingerprint: str, handler_id: str
    ) -> list[PublicationRecord]:
        stmt = select(_t).where(
            _t.c.completed_at.is_(None),
            _t.c.fingerprint == fingerprint,
            _t.c.handler_id == handler_id,
        ).order_by(_t.c.published_at)
        return await self._fetch(stmt)

    async def complete(self, record_id: RecordId) -> bool:
        """Complete a pending record; first writer wins."""
        now = self._clock.now()
        try:
            async with self._exclusive(), self._session_factory.begin() as session:
                result = await session.execute(
                    update(_t)
                    .where(_t.c.id == str(record_id), _t.c.completed_at.is_(None))
                    .values(completed_at=now)
                )
                if result.rowcount == 1:
                    logger.debug(f"Completed publication {record_id}")
                    return True

                exists = await session.execute(select(_t.c.id).where(_t.c.id == str(record_id)))
                if exists.first() is None:
                    logger.warning(f"Completion for unknown publication {record_id} ignored")
                else:
                    logger.debug(f"Publication {record_id} already completed")
                return False
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not complete publication {record_id}: {e}") from e

    async def delete_completed_older_than(self, age: timedelta) -> int:
        cutoff = self._clock.now() - age
        try:
            async with self._exclusive(), self._session_factory.begin() as session:
                result = await session.execute(
                    delete(_t).where(
                        _t.c.completed_at.is_not(None),
                        _t.c.completed_at <= cutoff,
                    )
                )
                return result.rowcount or 0
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not delete publications: {e}") from e

    async def _fetch(self, stmt: Any) -> list[PublicationRecord]:
        try:
            async with self._exclusive(), self._session_factory() as session:
                result = await session.execute(stmt)
                return [_from_row(row) for row in result]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not read publications: {e}") from e
