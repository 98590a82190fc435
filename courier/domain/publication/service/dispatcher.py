"""Dispatcher - records fan-outs and invokes handlers, after commit when asked."""

import asyncio
import logging
from dataclasses import field
from typing import TYPE_CHECKING

from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.model.registry import HandlerDescriptor, HandlerRegistry
from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.occurrence import Occurrence
from courier.domain.shared.service import Service
from courier.domain.shared.uow import UnitOfWork

if TYPE_CHECKING:
    from courier.testing.published import PublishedOccurrences

logger = logging.getLogger(__name__)


class Dispatcher(Service):
    """Publishes occurrences to their registered handlers through the ledger.

    For each occurrence the ledger records one pending publication per
    interested handler before any handler runs. Every handler that returns
    normally gets its own publication completed; a handler that raises
    leaves its publication pending for resubmission.

    Handlers flagged ``__asynchronous__`` run in background tasks; drain()
    waits for them.

    Example:
        async with SessionUnitOfWork(session) as uow:
            await orders.save(order)
            await dispatcher.publish(OrderPlaced(order_id=order.id), uow=uow)
    """

    _ledger: Ledger
    _registry: HandlerRegistry
    _background: set[asyncio.Task] = field(default_factory=set, init=False, repr=False)

    async def publish(
        self,
        occurrence: Occurrence,
        uow: UnitOfWork | None = None,
        capture: "PublishedOccurrences | None" = None,
    ) -> list[PublicationRecord]:
        """Publish an occurrence.

        Args:
            occurrence: The occurrence to deliver.
            uow: Unit of work to defer the dispatch to. When given, nothing
                happens until it commits, and nothing at all on rollback.
            capture: Collector that observes every published occurrence.

        Returns:
            The created publication records, or an empty list when the
            dispatch was deferred to ``uow``.
        """
        if uow is not None:

            async def dispatch_after_commit() -> None:
                await self._dispatch(occurrence, capture)

            uow.after_commit(dispatch_after_commit)
            return []

        return await self._dispatch(occurrence, capture)

    async def drain(self) -> None:
        """Wait for all background handler invocations to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def _dispatch(
        self, occurrence: Occurrence, capture: "PublishedOccurrences | None"
    ) -> list[PublicationRecord]:
        if capture is not None:
            capture.append(occurrence)

        handlers = self._registry.handlers_for(occurrence)
        if not handlers:
            logger.debug(f"No handlers for {type(occurrence).type_name()}")
            return []

        records = await self._ledger.record(occurrence, [h.handler_id for h in handlers])

        inline = []
        for handler, record in zip(handlers, records):
            if handler.asynchronous:
                task = asyncio.create_task(
                    self._invoke(handler, record, occurrence),
                    name=f"publication-{record.id}",
                )
                self._background.add(task)
                task.add_done_callback(self._background.discard)
            else:
                inline.append(self._invoke(handler, record, occurrence))

        if inline:
            await asyncio.gather(*inline)

        return records

    async def _invoke(
        self, handler: HandlerDescriptor, record: PublicationRecord, occurrence: Occurrence
    ) -> bool:
        try:
            await handler.invoke(occurrence)
        except Exception as e:
            logger.error(
                f"Handler '{handler.handler_id}' failed for publication {record.id}: {e}"
            )
            return False

        try:
            await self._ledger.complete(record.id)
        except Exception as e:
            logger.error(f"Could not complete publication {record.id}: {e}")
            return False
        return True
