"""Dataclass-based service base used for DI-constructed domain services."""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform()
class _ServiceMeta(type):
    """Turns every subclass of Service into a dataclass.

    Declared fields become constructor parameters, which lets dishka build
    services from their type hints:

        class Ledger(Service):
            _store: PublicationStore
            _clock: Clock

        Ledger(store, clock)
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for ledger services."""
