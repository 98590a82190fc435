"""Per-scenario capture of published occurrences.

A PublishedOccurrences is created fresh for one scenario, handed explicitly
to whatever publishes (``Dispatcher.publish(..., capture=published)``) and
discarded afterwards. It is never global.
"""

from typing import Callable, Generic, Iterator, TypeVar

from courier.domain.shared.occurrence import Occurrence

O = TypeVar("O", bound=Occurrence)


class TypedOccurrences(Generic[O]):
    """A filtered, read-only view of captured occurrences."""

    def __init__(self, occurrences: list[O]) -> None:
        self._occurrences = occurrences

    def matching(self, predicate: Callable[[O], bool]) -> "TypedOccurrences[O]":
        return TypedOccurrences([o for o in self._occurrences if predicate(o)])

    def first(self) -> O:
        if not self._occurrences:
            raise AssertionError("No matching occurrence was published")
        return self._occurrences[0]

    def __iter__(self) -> Iterator[O]:
        return iter(self._occurrences)

    def __len__(self) -> int:
        return len(self._occurrences)

    def __bool__(self) -> bool:
        return bool(self._occurrences)


class PublishedOccurrences:
    """Collects every occurrence published during one scenario.

    Example:
        published = PublishedOccurrences()
        await dispatcher.publish(OrderPlaced(order_id="42"), capture=published)

        assert published.of_type(OrderPlaced).matching(lambda o: o.order_id == "42")
    """

    def __init__(self) -> None:
        self._occurrences: list[Occurrence] = []

    def append(self, occurrence: Occurrence) -> None:
        self._occurrences.append(occurrence)

    def of_type(self, occurrence_type: type[O]) -> TypedOccurrences[O]:
        return TypedOccurrences(
            [o for o in self._occurrences if isinstance(o, occurrence_type)]
        )

    def clear(self) -> None:
        self._occurrences.clear()

    def __iter__(self) -> Iterator[Occurrence]:
        return iter(self._occurrences)

    def __len__(self) -> int:
        return len(self._occurrences)
