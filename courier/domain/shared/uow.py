"""Unit of work with an after-commit hook.

The ledger never sees transactions. Callers that publish from inside a unit of
work register the dispatch with ``after_commit`` so that it only happens once
the surrounding work is known to be durable, and never on rollback.
"""

import logging
from types import TracebackType
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

CommitCallback = Callable[[], Awaitable[None]]


class UnitOfWork:
    """Collects after-commit callbacks around a backend transaction.

    Subclasses override ``_commit`` and ``_rollback`` to drive an actual
    backend; the base class is usable on its own when there is nothing to
    commit (e.g. in tests).

    Usage:
        async with SessionUnitOfWork(session) as uow:
            session.add(order)
            await dispatcher.publish(OrderPlaced(...), uow=uow)
        # OrderPlaced is recorded and dispatched here, after the commit
    """

    def __init__(self) -> None:
        self._callbacks: list[CommitCallback] = []
        self._closed = False

    def after_commit(self, callback: CommitCallback) -> None:
        """Register a coroutine function to run once the commit succeeded."""
        if self._closed:
            raise RuntimeError("Unit of work already finished")
        self._callbacks.append(callback)

    @property
    def pending_callbacks(self) -> int:
        return len(self._callbacks)

    async def commit(self) -> None:
        """Commit the backend, then run the registered callbacks in order.

        A failing callback is logged and does not prevent the others from
        running: each callback stands for an independent dispatch.
        """
        await self._commit()
        self._closed = True
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                await callback()
            except Exception as e:
                logger.error(f"After-commit callback {callback!r} failed: {e}")

    async def rollback(self) -> None:
        """Roll the backend back and drop all registered callbacks."""
        self._closed = True
        dropped = len(self._callbacks)
        self._callbacks = []
        await self._rollback()
        if dropped:
            logger.debug(f"Rolled back unit of work, dropped {dropped} callbacks")

    async def _commit(self) -> None:
        pass

    async def _rollback(self) -> None:
        pass

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._closed:
            return
        if exc is None:
            await self.commit()
        else:
            await self.rollback()
