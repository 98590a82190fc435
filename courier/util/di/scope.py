"""Custom Dishka scopes for Courier."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Courier dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (store, clock, registry, dispatcher)
    - UOW: One sweep or one CLI command
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
