"""End-to-end ledger scenarios against both store implementations."""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import text

from courier.config import DatabaseConfig
from courier.domain.publication.model.payload import SerializedOccurrence
from courier.domain.publication.model.record import PublicationRecord, new_record_id
from courier.domain.publication.model.registry import HandlerDescriptor, HandlerRegistry
from courier.domain.publication.service.ledger import Ledger
from courier.domain.publication.service.resubmission import ResubmissionEngine
from courier.domain.shared.error import CourierError
from courier.domain.shared.occurrence import Occurrence
from courier.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    create_session_factory,
)
from courier.infrastructure.persistence.repository import (
    InMemoryPublicationStore,
    SQLAlchemyPublicationStore,
)
from courier.testing import ManualClock


class OrderPlaced(Occurrence):
    order_id: str


class Target:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls = 0

    async def __call__(self, occurrence: Occurrence) -> None:
        self.calls += 1
        if self.fail:
            raise RuntimeError("handler failed")


@pytest_asyncio.fixture(params=["memory", "sqlite"])
async def backend(request: pytest.FixtureRequest, clock: ManualClock):
    """(store, engine) where engine is None for the in-memory store."""
    if request.param == "memory":
        yield InMemoryPublicationStore(clock), None
        return

    engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await create_schema(engine)
    yield SQLAlchemyPublicationStore(create_session_factory(engine), clock), engine
    await engine.dispose()


class TestScenarioA:
    """A failed handler is found, replayed alone, and then completed."""

    async def test_failed_handler_is_resubmitted(self, backend, clock: ManualClock):
        store, _ = backend
        ledger = Ledger(store, clock)
        a, b, c = Target(), Target(fail=True), Target()
        registry = HandlerRegistry(
            HandlerDescriptor(handler_id=h, occurrence_type=OrderPlaced, invoke=t)
            for h, t in (("A", a), ("B", b), ("C", c))
        )
        engine = ResubmissionEngine(ledger, registry)

        records = await ledger.record(OrderPlaced(order_id="E1"), ["A", "B", "C"])
        by_handler = {r.handler_id: r for r in records}
        await ledger.complete(by_handler["A"].id)
        await ledger.complete(by_handler["C"].id)

        incomplete = await ledger.find_incomplete()
        assert [r.handler_id for r in incomplete] == ["B"]

        b.fail = False
        report = await engine.resubmit(lambda record: True)

        assert report.succeeded == 1
        assert await ledger.find_incomplete() == []
        assert (a.calls, b.calls, c.calls) == (0, 1, 0)


class TestScenarioB:
    """Pruning honours each record's own completion date."""

    async def test_prune_removes_only_old_completions(self, backend, clock: ManualClock):
        store, _ = backend
        ledger = Ledger(store, clock)
        first, second = await ledger.record(OrderPlaced(order_id="E1"), ["A", "B"])

        await ledger.complete(first.id)
        clock.advance(seconds=10)
        await ledger.complete(second.id)
        clock.advance(seconds=2)

        assert await ledger.prune(timedelta(seconds=5)) == 1
        assert await ledger.get(first.id) is None
        assert (await ledger.get(second.id)).is_completed


class TestScenarioC:
    """A batch that fails mid-way leaves nothing behind."""

    async def test_failed_batch_is_all_or_nothing(self, backend, clock: ManualClock):
        store, engine = backend
        ledger = Ledger(store, clock)

        if engine is None:
            # The third record reuses the first id: the batch is refused as a whole
            serialized = SerializedOccurrence.of(OrderPlaced(order_id="E1"))
            records = [
                PublicationRecord(
                    id=new_record_id(),
                    handler_id=h,
                    occurrence=serialized,
                    published_at=clock.now(),
                )
                for h in ("A", "B")
            ]
            records.append(records[0].model_copy(update={"handler_id": "C"}))
            with pytest.raises(CourierError):
                await store.insert(records)
        else:
            # The third row of the batch is rejected by the database
            async with engine.begin() as conn:
                await conn.execute(
                    text(
                        "CREATE TRIGGER simulated_fault BEFORE INSERT ON event_publications "
                        "WHEN NEW.handler_id = 'C' "
                        "BEGIN SELECT RAISE(ABORT, 'simulated store fault'); END"
                    )
                )
            with pytest.raises(CourierError):
                await ledger.record(OrderPlaced(order_id="E1"), ["A", "B", "C"])

        assert await ledger.find_incomplete() == []
