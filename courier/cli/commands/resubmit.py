"""Resubmit command - replay incomplete publications."""

import sys
from datetime import timedelta

import cyclopts
from dishka import AsyncContainer

from courier.cli.console import get_console
from courier.cli.util.runtime import run_with_container
from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.model.report import ResubmissionReport
from courier.domain.publication.service.resubmission import ResubmissionEngine
from courier.domain.shared.error import CourierError

app = cyclopts.App(name="resubmit", help="Replay incomplete publications")


@app.default
def resubmit(
    older_than: float = 0.0,
    handler: list[str] | None = None,
) -> None:
    """Re-invoke the handlers of incomplete publications.

    Args:
        older_than: Only replay publications published more than this many seconds ago.
        handler: Restrict the sweep to these handler ids.
    """
    console = get_console()
    selected = set(handler) if handler else None

    def predicate(record: PublicationRecord) -> bool:
        return selected is None or record.handler_id in selected

    async def sweep(container: AsyncContainer) -> ResubmissionReport:
        engine = await container.get(ResubmissionEngine)
        if older_than > 0:
            return await engine.resubmit_older_than(timedelta(seconds=older_than), predicate)
        return await engine.resubmit(predicate)

    try:
        report = run_with_container(sweep)
    except CourierError as e:
        console.error(f"Resubmission failed: {e}")
        sys.exit(1)

    console.report(report)
    if report.failed:
        sys.exit(1)
