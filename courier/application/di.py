from typing import Any, Iterable

from dishka import AsyncContainer, make_async_container

from courier.config import Config
from courier.domain.publication.model.registry import HandlerDescriptor, HandlerRegistry
from courier.domain.publication.util.di import LedgerProvider
from courier.domain.shared.occurrence import OccurrenceHandler
from courier.infrastructure.event import SweepProvider
from courier.infrastructure.event.discovery import discover_handlers
from courier.infrastructure.persistence import PersistenceProvider
from courier.util.di import ConfigProvider
from courier.util.di.scope import Scope


def create_container(
    config: Config | None = None,
    handlers: Iterable[OccurrenceHandler[Any] | HandlerDescriptor] | None = None,
) -> AsyncContainer:
    """Build the application container.

    Args:
        config: Application config; read from env/.env/YAML when omitted.
        handlers: Every handler the application registers. When omitted,
            handlers are discovered from entry points and config. The
            registration table is built once here and never changes
            afterwards.
    """
    if config is None:
        # Pydantic Settings populates from env vars at runtime
        config = Config()  # type: ignore[call-arg]

    if handlers is None:
        handlers = discover_handlers(config.ledger.handlers)

    return make_async_container(
        ConfigProvider(),
        PersistenceProvider(),
        LedgerProvider(),
        SweepProvider(),
        context={Config: config, HandlerRegistry: HandlerRegistry.build(handlers)},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
