"""Handler discovery via entry points and configured references."""

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Iterable

from courier.domain.publication.model.registry import HandlerDescriptor
from courier.domain.shared.error import ConfigurationError
from courier.domain.shared.occurrence import OccurrenceHandler

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "courier.handlers"

Registrable = OccurrenceHandler[Any] | HandlerDescriptor


def discover_handlers(references: Iterable[str] = ()) -> list[Registrable]:
    """Load handlers from entry points and explicit ``module:attr`` references.

    Each target may be a handler instance, a HandlerDescriptor, a handler
    class constructible without arguments, or a zero-argument callable that
    returns any of those (or an iterable of them).

    Example pyproject.toml entry:
        [project.entry-points."courier.handlers"]
        mail = "shop.mail.handlers:all_handlers"

    Returns:
        Handlers in discovery order: entry points first, then references.

    Raises:
        ConfigurationError: If a configured reference cannot be loaded.
            Broken entry points are logged and skipped.
    """
    handlers: list[Registrable] = []

    for ep in entry_points(group=ENTRY_POINT_GROUP):
        try:
            loaded = _materialize(ep.load(), ep.name)
            handlers.extend(loaded)
            logger.debug("Discovered %d handlers from entry point %s", len(loaded), ep.name)
        except Exception as e:
            logger.warning("Failed to load handlers from entry point '%s': %s", ep.name, e)

    for reference in references:
        ep = EntryPoint(name=reference, value=reference, group=ENTRY_POINT_GROUP)
        try:
            handlers.extend(_materialize(ep.load(), reference))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Cannot load handlers from '{reference}': {e}") from e

    return handlers


def _materialize(target: Any, name: str) -> list[Registrable]:
    """Turn a loaded entry point target into handler instances."""
    if isinstance(target, (OccurrenceHandler, HandlerDescriptor)):
        return [target]
    if isinstance(target, type):
        if not issubclass(target, OccurrenceHandler):
            raise ConfigurationError(f"{name}: {target.__name__} is not an OccurrenceHandler")
        return [target()]
    if callable(target):
        return _materialize_many(target(), name)
    return _materialize_many(target, name)


def _materialize_many(produced: Any, name: str) -> list[Registrable]:
    if isinstance(produced, (OccurrenceHandler, HandlerDescriptor)):
        return [produced]
    try:
        items = list(produced)
    except TypeError:
        raise ConfigurationError(
            f"{name}: expected handlers, got {type(produced).__name__}"
        ) from None
    result: list[Registrable] = []
    for item in items:
        if not isinstance(item, (OccurrenceHandler, HandlerDescriptor)):
            raise ConfigurationError(f"{name}: {item!r} is not an OccurrenceHandler")
        result.append(item)
    return result
