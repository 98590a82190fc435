"""Prune command - delete completed publications."""

import sys
from datetime import timedelta

import cyclopts
from dishka import AsyncContainer

from courier.cli.console import get_console
from courier.cli.util.runtime import run_with_container
from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.error import CourierError

app = cyclopts.App(name="prune", help="Delete completed publications")


@app.default
def prune(older_than: float) -> None:
    """Delete publications completed more than ``older_than`` seconds ago.

    Args:
        older_than: Minimum age in seconds of the completion timestamp.
    """
    console = get_console()
    if older_than < 0:
        console.error("--older-than must not be negative")
        sys.exit(1)

    async def delete(container: AsyncContainer) -> int:
        ledger = await container.get(Ledger)
        return await ledger.prune(timedelta(seconds=older_than))

    try:
        deleted = run_with_container(delete)
    except CourierError as e:
        console.error(f"Prune failed: {e}")
        sys.exit(1)

    console.success(f"Deleted {deleted} completed publication{'s' if deleted != 1 else ''}")
