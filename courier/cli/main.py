"""Main CLI application using Cyclopts.

Each command builds its own container from Config and talks to the
publication ledger directly.
"""

import cyclopts

from courier.cli.commands import complete, migrate, pending, prune, resubmit

app = cyclopts.App(
    name="courier",
    help="Courier - at-least-once delivery ledger",
)

app.command(pending.app, name="pending")
app.command(resubmit.app, name="resubmit")
app.command(complete.app, name="complete")
app.command(prune.app, name="prune")
app.command(migrate.app, name="migrate")
