"""Unit of work bound to a SQLAlchemy session."""

from sqlalchemy.ext.asyncio import AsyncSession

from courier.domain.shared.uow import UnitOfWork


class SessionUnitOfWork(UnitOfWork):
    """Commits or rolls back an AsyncSession, then runs after-commit hooks.

    Publications are written by the ledger in their own transactions, so a
    dispatch registered here only ever sees work that is already committed.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__()
        self._session = session

    async def _commit(self) -> None:
        await self._session.commit()

    async def _rollback(self) -> None:
        await self._session.rollback()
