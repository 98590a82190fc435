"""Helpers for testing code that publishes through the ledger."""

from courier.testing.clock import ManualClock
from courier.testing.published import PublishedOccurrences, TypedOccurrences

__all__ = ["ManualClock", "PublishedOccurrences", "TypedOccurrences"]
