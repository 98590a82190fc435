from dataclasses import dataclass


@dataclass(frozen=True)
class ResubmissionReport:
    """Outcome of one resubmission sweep.

    Attributes:
        attempted: Records whose handler was invoked (succeeded + failed).
        succeeded: Replays that ran and were marked completed.
        failed: Replays whose handler raised, or whose completion write failed.
        skipped: Records that could not be replayed at all (unresolvable
            payload or handler no longer registered).
    """

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def selected(self) -> int:
        """All records the predicate selected."""
        return self.attempted + self.skipped

    def __str__(self) -> str:
        return (
            f"attempted={self.attempted} succeeded={self.succeeded} "
            f"failed={self.failed} skipped={self.skipped}"
        )
