"""Migrate command - bring the ledger schema up to date."""

import cyclopts

from courier.cli.console import get_console
from courier.config import Config, configure_logging
from courier.infrastructure.persistence.migrate import run_migrations

app = cyclopts.App(name="migrate", help="Run database migrations")


@app.default
def migrate() -> None:
    """Upgrade the configured database to the latest schema revision."""
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    run_migrations(config.database.url)
    console.success("Database is up to date")
