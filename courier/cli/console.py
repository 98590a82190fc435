"""Console output for the CLI.

Provides a Console class that wraps rich for consistent output.
All CLI output should go through this module.
"""

from datetime import UTC, datetime
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from courier.domain.publication.model.record import PublicationRecord
from courier.domain.publication.model.report import ResubmissionReport


def relative_time(instant: datetime, now: datetime | None = None) -> str:
    """Render an instant relative to now (e.g., '2 hours ago')."""
    now = now or datetime.now(UTC)
    seconds = (now - instant).total_seconds()

    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        mins = int(seconds // 60)
        return f"{mins} minute{'s' if mins != 1 else ''} ago"
    elif seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif seconds < 604800:
        days = int(seconds // 86400)
        return f"{days} day{'s' if days != 1 else ''} ago"
    else:
        return instant.strftime("%Y-%m-%d %H:%M")


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    # -------------------------------------------------------------------------
    # Publications
    # -------------------------------------------------------------------------

    def publications(self, records: list[PublicationRecord]) -> None:
        """Print publication records as a table, oldest first."""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Id", style="dim")
        table.add_column("Handler", style="cyan")
        table.add_column("Occurrence")
        table.add_column("Published")
        table.add_column("Status")

        for record in sorted(records, key=lambda r: r.published_at):
            table.add_row(
                str(record.id),
                record.handler_id,
                record.occurrence_type,
                relative_time(record.published_at),
                record.status.value,
            )

        self._console.print(table)

    def report(self, report: ResubmissionReport) -> None:
        """Print the outcome of a resubmission sweep."""
        if report.selected == 0:
            self.info("Nothing to resubmit")
            return

        self._console.print(
            f"[bold]Resubmitted[/bold] {report.attempted} publication"
            f"{'s' if report.attempted != 1 else ''}: "
            f"[green]{report.succeeded} succeeded[/green], "
            f"[red]{report.failed} failed[/red], "
            f"[yellow]{report.skipped} skipped[/yellow]"
        )


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
