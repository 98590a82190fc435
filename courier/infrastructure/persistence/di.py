from typing import AsyncIterable

from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from courier.config import Config
from courier.domain.publication.port.store import PublicationStore
from courier.domain.shared.clock import Clock
from courier.domain.shared.uow import UnitOfWork
from courier.infrastructure.persistence.database import (
    create_db_engine,
    create_session_factory,
)
from courier.infrastructure.persistence.repository.publication import (
    SQLAlchemyPublicationStore,
)
from courier.infrastructure.persistence.uow import SessionUnitOfWork
from courier.util.di.base import Provider
from courier.util.di.scope import Scope


class PersistenceProvider(Provider):
    """Provides the database engine, the publication store and units of work.

    The engine, session factory and store are APP-scoped: the store opens a
    short transaction per operation from the shared session factory. The
    host application's session and its UnitOfWork live in the UOW scope.
    """

    # Factories require method syntax
    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncIterable[AsyncEngine]:
        engine = create_db_engine(config.database)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_publication_store(
        self, session_factory: async_sessionmaker[AsyncSession], clock: Clock
    ) -> PublicationStore:
        return SQLAlchemyPublicationStore(session_factory, clock)

    @provide(scope=Scope.UOW)
    async def get_session(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> AsyncIterable[AsyncSession]:
        async with session_factory() as session:
            yield session

    @provide(scope=Scope.UOW)
    def get_unit_of_work(self, session: AsyncSession) -> UnitOfWork:
        return SessionUnitOfWork(session)
