"""Occurrences and the handlers that consume them."""

import importlib
from abc import ABCMeta
from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Generic,
    TypeVar,
    dataclass_transform,
    get_args,
    get_origin,
)

from pydantic import BaseModel, ConfigDict

O = TypeVar("O", bound="Occurrence")


class Occurrence(BaseModel):
    """Base class for occurrences delivered through the ledger.

    Subclasses are automatically registered under their type descriptor in
    Occurrence._registry. The descriptor defaults to ``module.QualName`` and
    can be pinned with ``__occurrence_type__`` so that a class can be moved
    or renamed without orphaning publications that are already stored.

    Example:
        class OrderPlaced(Occurrence):
            __occurrence_type__ = "shop.OrderPlaced"

            order_id: str
            total: Decimal
    """

    model_config = ConfigDict(frozen=True)

    __occurrence_type__: ClassVar[str | None] = None

    # Auto-populated registry of all Occurrence subclasses
    _registry: ClassVar[dict[str, type["Occurrence"]]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._registry[cls.type_name()] = cls

    @classmethod
    def type_name(cls) -> str:
        """Stable type descriptor stored next to the serialized payload."""
        declared = cls.__dict__.get("__occurrence_type__")
        if declared:
            return declared
        return f"{cls.__module__}.{cls.__qualname__}"

    @classmethod
    def resolve_type(cls, type_name: str) -> type["Occurrence"] | None:
        """Find the occurrence class for a stored type descriptor.

        Looks in the registry first, then tries importing the module part of
        the descriptor (the registry is only populated for modules that were
        imported in this process).
        """
        found = cls._registry.get(type_name)
        if found is not None:
            return found

        module_name, _, qualname = type_name.rpartition(".")
        while module_name:
            try:
                target: Any = importlib.import_module(module_name)
            except ImportError:
                module_name, _, head = module_name.rpartition(".")
                qualname = f"{head}.{qualname}"
                continue
            for part in qualname.split("."):
                target = getattr(target, part, None)
                if target is None:
                    return None
            if isinstance(target, type) and issubclass(target, Occurrence):
                return target
            return None
        return None


# --- OccurrenceHandler ---


def _extract_occurrence_type(cls: type) -> type[Occurrence] | None:
    """Extract the occurrence type O from OccurrenceHandler[O] in class bases."""
    for base in getattr(cls, "__orig_bases__", []):
        origin = get_origin(base)
        origin_name = getattr(origin, "__name__", None)
        if origin is not None and origin_name == "OccurrenceHandler":
            args = get_args(base)
            if args and isinstance(args[0], type) and issubclass(args[0], Occurrence):
                return args[0]
    return None


@dataclass_transform()
class _OccurrenceHandlerMeta(ABCMeta):
    """Applies @dataclass and extracts __occurrence_type__ from OccurrenceHandler[O]."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]) -> type:
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)
            occurrence_type = _extract_occurrence_type(cls)
            if occurrence_type is not None:
                cls.__occurrence_type__ = occurrence_type
        return cls


class OccurrenceHandler(Generic[O], metaclass=_OccurrenceHandlerMeta):
    """Base class for occurrence handlers.

    Subclasses are automatically dataclasses, so collaborators are declared
    as fields. The handled occurrence type is taken from the generic
    parameter.

    Configuration is via class variables:
        __handler_id__: Stable identity recorded on each publication
            (default: ``module.QualName`` of the handler class)
        __asynchronous__: Dispatch in a background task instead of awaiting
            the handler inline (default: False)

    Handlers must be idempotent: the ledger guarantees at-least-once
    delivery, so a crash between a successful ``handle`` and the completion
    write replays the occurrence.

    Example:
        class SendConfirmationMail(OccurrenceHandler[OrderPlaced]):
            __handler_id__ = "mail.order-confirmation"

            _mailer: Mailer

            async def handle(self, occurrence: OrderPlaced) -> None:
                await self._mailer.send_confirmation(occurrence.order_id)
    """

    __occurrence_type__: ClassVar[type[Occurrence]]
    __handler_id__: ClassVar[str | None] = None
    __asynchronous__: ClassVar[bool] = False

    @classmethod
    def handler_id(cls) -> str:
        return cls.__handler_id__ or f"{cls.__module__}.{cls.__qualname__}"

    async def handle(self, occurrence: O) -> None:
        """Handle one occurrence.

        Raises:
            NotImplementedError: If the subclass does not override it.
        """
        raise NotImplementedError(f"{type(self).__name__} must implement handle()")
