"""Run an async CLI command against a freshly built container."""

import asyncio
from typing import Awaitable, Callable, TypeVar

from dishka import AsyncContainer

from courier.application.di import create_container
from courier.config import Config, configure_logging
from courier.infrastructure.persistence.migrate import run_migrations

T = TypeVar("T")


def run_with_container(command: Callable[[AsyncContainer], Awaitable[T]]) -> T:
    """Load config, migrate SQLite if allowed, then run ``command`` in a container."""
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    if config.database.auto_migrate and config.database.url.startswith("sqlite"):
        run_migrations(config.database.url)

    async def main() -> T:
        container = create_container(config)
        try:
            return await command(container)
        finally:
            await container.close()

    return asyncio.run(main())
