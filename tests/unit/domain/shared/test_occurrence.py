"""Unit tests for Occurrence type descriptors and OccurrenceHandler."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from courier.domain.shared.occurrence import Occurrence, OccurrenceHandler


class ParcelShipped(Occurrence):
    parcel_id: str


class ParcelLost(Occurrence):
    __occurrence_type__ = "logistics.ParcelLost"

    parcel_id: str


class NotifyRecipient(OccurrenceHandler[ParcelShipped]):
    __handler_id__ = "notify-recipient"

    seen: list[str]

    async def handle(self, occurrence: ParcelShipped) -> None:
        self.seen.append(occurrence.parcel_id)


class AuditShipment(OccurrenceHandler[ParcelShipped]):
    pass


class TestOccurrenceTypeName:
    def test_defaults_to_module_and_qualname(self):
        assert ParcelShipped.type_name() == f"{__name__}.ParcelShipped"

    def test_declared_type_name_wins(self):
        assert ParcelLost.type_name() == "logistics.ParcelLost"

    def test_subclass_does_not_inherit_declared_name(self):
        class ParcelLostAbroad(ParcelLost):
            country: str

        assert ParcelLostAbroad.type_name() != "logistics.ParcelLost"

    def test_subclasses_are_registered(self):
        assert Occurrence.resolve_type("logistics.ParcelLost") is ParcelLost

    def test_occurrences_are_frozen(self):
        shipped = ParcelShipped(parcel_id="p-1")

        with pytest.raises(PydanticValidationError):
            shipped.parcel_id = "p-2"  # type: ignore[misc]


class TestResolveType:
    def test_unknown_type_returns_none(self):
        assert Occurrence.resolve_type("nowhere.to.be.Found") is None

    def test_imports_module_when_not_registered(self):
        name = f"{__name__}.ParcelShipped"
        Occurrence._registry.pop(name)
        try:
            assert Occurrence.resolve_type(name) is ParcelShipped
        finally:
            Occurrence._registry[name] = ParcelShipped

    def test_non_occurrence_attribute_returns_none(self):
        assert Occurrence.resolve_type(f"{__name__}.NotifyRecipient") is None


class TestOccurrenceHandler:
    def test_occurrence_type_from_generic_parameter(self):
        assert NotifyRecipient.__occurrence_type__ is ParcelShipped

    def test_declared_handler_id(self):
        assert NotifyRecipient.handler_id() == "notify-recipient"

    def test_default_handler_id_is_qualified_class_name(self):
        assert AuditShipment.handler_id() == f"{__name__}.AuditShipment"

    def test_handlers_are_dataclasses(self):
        handler = NotifyRecipient(seen=[])

        assert handler.seen == []

    async def test_handle_dispatches_to_subclass(self):
        handler = NotifyRecipient(seen=[])

        await handler.handle(ParcelShipped(parcel_id="p-1"))

        assert handler.seen == ["p-1"]

    async def test_unimplemented_handle_raises(self):
        with pytest.raises(NotImplementedError):
            await AuditShipment().handle(ParcelShipped(parcel_id="p-1"))
