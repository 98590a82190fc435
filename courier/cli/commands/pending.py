"""Pending command - list incomplete publications."""

import sys
from datetime import timedelta

import cyclopts
from dishka import AsyncContainer

from courier.cli.console import get_console
from courier.cli.util.runtime import run_with_container
from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.error import CourierError

app = cyclopts.App(name="pending", help="List incomplete publications")


@app.default
def pending(
    older_than: float = 0.0,
    handler: list[str] | None = None,
) -> None:
    """Show publications whose handlers have not completed yet (oldest first).

    Args:
        older_than: Only show publications published more than this many seconds ago.
        handler: Restrict the listing to these handler ids.
    """
    console = get_console()

    async def fetch(container: AsyncContainer) -> list[PublicationRecord]:
        ledger = await container.get(Ledger)
        if older_than > 0:
            return await ledger.find_incomplete_older_than(timedelta(seconds=older_than))
        return await ledger.find_incomplete()

    try:
        records = run_with_container(fetch)
    except CourierError as e:
        console.error(f"Could not list publications: {e}")
        sys.exit(1)

    if handler:
        records = [r for r in records if r.handler_id in handler]

    if not records:
        console.info("No incomplete publications")
        return

    console.print(f"[bold]Incomplete publications[/bold] [dim]({len(records)})[/dim]\n")
    console.publications(records)
