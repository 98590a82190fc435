"""Unit tests for handler discovery from entry points and references."""

from unittest.mock import MagicMock, patch

import pytest

from courier.domain.publication.model.registry import HandlerDescriptor
from courier.domain.shared.error import ConfigurationError
from courier.domain.shared.occurrence import Occurrence, OccurrenceHandler
from courier.infrastructure.event.discovery import discover_handlers


class ReportFiled(Occurrence):
    report_id: str


class ArchiveReport(OccurrenceHandler[ReportFiled]):
    __handler_id__ = "archive-report"

    async def handle(self, occurrence: ReportFiled) -> None:
        pass


class NotifyReviewers(OccurrenceHandler[ReportFiled]):
    __handler_id__ = "notify-reviewers"

    async def handle(self, occurrence: ReportFiled) -> None:
        pass


def all_handlers() -> list[OccurrenceHandler]:
    return [ArchiveReport(), NotifyReviewers()]


NOT_A_HANDLER = 42


def fake_entry_point(name: str, loaded=None, error: Exception | None = None) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    if error is not None:
        ep.load.side_effect = error
    else:
        ep.load.return_value = loaded
    return ep


@pytest.fixture
def no_entry_points():
    with patch("courier.infrastructure.event.discovery.entry_points", return_value=[]):
        yield


class TestReferences:
    def test_handler_class(self, no_entry_points):
        (handler,) = discover_handlers([f"{__name__}:ArchiveReport"])

        assert isinstance(handler, ArchiveReport)

    def test_factory_returning_many(self, no_entry_points):
        handlers = discover_handlers([f"{__name__}:all_handlers"])

        assert [type(h) for h in handlers] == [ArchiveReport, NotifyReviewers]

    def test_missing_module(self, no_entry_points):
        with pytest.raises(ConfigurationError):
            discover_handlers(["courier_missing_module:handlers"])

    def test_wrong_target_type(self, no_entry_points):
        with pytest.raises(ConfigurationError):
            discover_handlers([f"{__name__}:NOT_A_HANDLER"])

    def test_class_that_is_not_a_handler(self, no_entry_points):
        with pytest.raises(ConfigurationError):
            discover_handlers([f"{__name__}:ReportFiled"])


class TestEntryPoints:
    def test_loads_entry_points_before_references(self):
        descriptor = HandlerDescriptor.of(NotifyReviewers())
        eps = [fake_entry_point("reviews", loaded=descriptor)]

        with patch("courier.infrastructure.event.discovery.entry_points", return_value=eps):
            handlers = discover_handlers([f"{__name__}:ArchiveReport"])

        assert handlers[0] is descriptor
        assert isinstance(handlers[1], ArchiveReport)

    def test_broken_entry_point_is_skipped(self):
        eps = [
            fake_entry_point("broken", error=ImportError("no such module")),
            fake_entry_point("ok", loaded=ArchiveReport),
        ]

        with patch("courier.infrastructure.event.discovery.entry_points", return_value=eps):
            handlers = discover_handlers()

        assert [type(h) for h in handlers] == [ArchiveReport]
