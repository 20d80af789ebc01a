"""Error taxonomy for the query engine.

Not-found is not an error here: lookups return ``None`` and the caller maps
that to its own "not found" outcome. Coercion problems on intake are absorbed
by the normalizer and never raised.
"""


class VoterRollError(Exception):
    """Base class for errors surfaced to the caller."""


class StoreError(VoterRollError):
    """The underlying store failed while executing a read or write."""


class QueryTimeoutError(VoterRollError):
    """A request did not complete within its deadline."""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Query exceeded deadline of {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds
