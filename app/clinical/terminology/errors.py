from __future__ import annotations


class TerminologyError(Exception):
    """Base class for terminology engine failures."""


class StoreError(TerminologyError):
    """The backing record store failed or returned malformed data."""


class StoreTimeoutError(StoreError):
    """A store statement exceeded the configured timeout."""


class TooManyResultsError(TerminologyError):
    """Symptom search matched more disease groups than the configured cap."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"search matched {count} disease groups (limit {limit}); refine the query")
        self.count = count
        self.limit = limit


class SearchCancelledError(TerminologyError):
    """The caller cancelled a search between disease groups."""
