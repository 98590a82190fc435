"""Handler registration table.

Built once at startup from an explicit list of handlers and immutable
thereafter. The dispatcher uses it to resolve the handlers interested in an
occurrence; the resubmission engine uses it to find the single handler a
pending record belongs to.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Iterable, Iterator, Mapping

from courier.domain.shared.error import ConfigurationError
from courier.domain.shared.occurrence import Occurrence, OccurrenceHandler

Invoke = Callable[[Occurrence], Awaitable[None]]


@dataclass(frozen=True)
class HandlerDescriptor:
    """A registered handler: its stable id and how to invoke it."""

    handler_id: str
    occurrence_type: type[Occurrence]
    invoke: Invoke
    asynchronous: bool = False

    @classmethod
    def of(cls, handler: OccurrenceHandler[Any]) -> "HandlerDescriptor":
        handler_type = type(handler)
        occurrence_type = getattr(handler_type, "__occurrence_type__", None)
        if occurrence_type is None:
            raise ConfigurationError(
                f"{handler_type.__name__} does not declare an occurrence type; "
                "subclass OccurrenceHandler[SomeOccurrence]"
            )
        return cls(
            handler_id=handler_type.handler_id(),
            occurrence_type=occurrence_type,
            invoke=handler.handle,
            asynchronous=handler_type.__asynchronous__,
        )


class HandlerRegistry:
    """Immutable mapping of occurrence type -> ordered handler descriptors."""

    def __init__(self, descriptors: Iterable[HandlerDescriptor] = ()) -> None:
        by_id: dict[str, HandlerDescriptor] = {}
        by_type: dict[type[Occurrence], list[HandlerDescriptor]] = {}

        for descriptor in descriptors:
            if descriptor.handler_id in by_id:
                raise ConfigurationError(
                    f"Handler id '{descriptor.handler_id}' is registered twice"
                )
            by_id[descriptor.handler_id] = descriptor
            by_type.setdefault(descriptor.occurrence_type, []).append(descriptor)

        self._by_id: Mapping[str, HandlerDescriptor] = MappingProxyType(by_id)
        self._by_type: Mapping[type[Occurrence], tuple[HandlerDescriptor, ...]] = (
            MappingProxyType({k: tuple(v) for k, v in by_type.items()})
        )

    @classmethod
    def build(
        cls, handlers: Iterable[OccurrenceHandler[Any] | HandlerDescriptor]
    ) -> "HandlerRegistry":
        """Build a registry from handler instances and/or ready descriptors."""
        return cls(
            h if isinstance(h, HandlerDescriptor) else HandlerDescriptor.of(h) for h in handlers
        )

    def handlers_for(
        self, occurrence: Occurrence | type[Occurrence]
    ) -> tuple[HandlerDescriptor, ...]:
        """Handlers interested in an occurrence.

        Handlers registered for a base occurrence class also receive its
        subclasses. Order: most specific class first, registration order
        within a class.
        """
        occurrence_type = occurrence if isinstance(occurrence, type) else type(occurrence)
        found: list[HandlerDescriptor] = []
        for klass in occurrence_type.__mro__:
            found.extend(self._by_type.get(klass, ()))
        return tuple(found)

    def get(self, handler_id: str) -> HandlerDescriptor | None:
        return self._by_id.get(handler_id)

    @property
    def handler_ids(self) -> list[str]:
        return list(self._by_id)

    def __contains__(self, handler_id: object) -> bool:
        return handler_id in self._by_id

    def __iter__(self) -> Iterator[HandlerDescriptor]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)
