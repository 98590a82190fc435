"""Unit tests for HandlerRegistry."""

import pytest

from courier.domain.publication.model.registry import HandlerDescriptor, HandlerRegistry
from courier.domain.shared.error import ConfigurationError
from courier.domain.shared.occurrence import Occurrence, OccurrenceHandler


class AccountEvent(Occurrence):
    account_id: str


class AccountClosed(AccountEvent):
    reason: str = ""


class Unrelated(Occurrence):
    pass


class AuditAccounts(OccurrenceHandler[AccountEvent]):
    __handler_id__ = "audit"

    async def handle(self, occurrence: AccountEvent) -> None:
        pass


class RefundBalance(OccurrenceHandler[AccountClosed]):
    __handler_id__ = "refund"
    __asynchronous__ = True

    async def handle(self, occurrence: AccountClosed) -> None:
        pass


class ArchiveAccount(OccurrenceHandler[AccountClosed]):
    __handler_id__ = "archive"

    async def handle(self, occurrence: AccountClosed) -> None:
        pass


async def _noop(occurrence: Occurrence) -> None:
    pass


class TestHandlerDescriptor:
    def test_of_handler_instance(self):
        handler = RefundBalance()

        descriptor = HandlerDescriptor.of(handler)

        assert descriptor.handler_id == "refund"
        assert descriptor.occurrence_type is AccountClosed
        assert descriptor.asynchronous is True

    def test_handler_without_occurrence_type_is_rejected(self):
        class Untyped(OccurrenceHandler):  # type: ignore[type-arg]
            pass

        with pytest.raises(ConfigurationError):
            HandlerDescriptor.of(Untyped())


class TestHandlerRegistry:
    @pytest.fixture
    def registry(self) -> HandlerRegistry:
        return HandlerRegistry.build([AuditAccounts(), RefundBalance(), ArchiveAccount()])

    def test_handlers_for_exact_type_in_registration_order(self, registry: HandlerRegistry):
        ids = [h.handler_id for h in registry.handlers_for(AccountClosed(account_id="a"))]

        assert ids == ["refund", "archive", "audit"]

    def test_base_type_handlers_do_not_receive_other_types(self, registry: HandlerRegistry):
        ids = [h.handler_id for h in registry.handlers_for(AccountEvent(account_id="a"))]

        assert ids == ["audit"]

    def test_no_handlers(self, registry: HandlerRegistry):
        assert registry.handlers_for(Unrelated()) == ()

    def test_lookup_by_id(self, registry: HandlerRegistry):
        assert registry.get("archive").occurrence_type is AccountClosed
        assert registry.get("missing") is None
        assert "audit" in registry
        assert registry.handler_ids == ["audit", "refund", "archive"]
        assert len(registry) == 3

    def test_duplicate_handler_id_is_rejected(self):
        with pytest.raises(ConfigurationError):
            HandlerRegistry.build([AuditAccounts(), AuditAccounts()])

    def test_accepts_ready_descriptors(self):
        registry = HandlerRegistry.build(
            [HandlerDescriptor(handler_id="plain", occurrence_type=Unrelated, invoke=_noop)]
        )

        assert [h.handler_id for h in registry.handlers_for(Unrelated)] == ["plain"]
