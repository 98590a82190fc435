"""Complete command - mark one publication as done by hand."""

import sys
from uuid import UUID

import cyclopts
from dishka import AsyncContainer

from courier.cli.console import get_console
from courier.cli.util.runtime import run_with_container
from courier.domain.publication.model.record import PublicationRecord, RecordId
from courier.domain.publication.service.ledger import Ledger
from courier.domain.shared.error import CourierError, UnknownRecordError

app = cyclopts.App(name="complete", help="Mark a publication as completed")


@app.default
def complete(record_id: str) -> None:
    """Complete a publication without invoking its handler.

    Use this for records whose handler was retired or whose work was done
    out of band; they stop being resubmitted.

    Args:
        record_id: Id of the publication, as listed by `courier pending`.
    """
    console = get_console()
    try:
        rid = RecordId(UUID(record_id))
    except ValueError:
        console.error(f"Not a publication id: {record_id}")
        sys.exit(1)

    async def mark(container: AsyncContainer) -> tuple[PublicationRecord, bool]:
        ledger = await container.get(Ledger)
        record = await ledger.require(rid)
        return record, await ledger.complete(rid)

    try:
        record, completed = run_with_container(mark)
    except UnknownRecordError as e:
        console.error(e.message, hint="List pending publications with: courier pending")
        sys.exit(1)
    except CourierError as e:
        console.error(f"Completion failed: {e}")
        sys.exit(1)

    if completed:
        console.success(f"Completed publication {rid} for handler '{record.handler_id}'")
    else:
        console.warning(f"Publication {rid} was already completed")
