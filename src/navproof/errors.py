from __future__ import annotations


class NavproofError(Exception):
    """Base class for faults raised by the retrieval pipeline."""


class NetworkError(NavproofError):
    """Connection failure, timeout, or non-success HTTP status for one request."""


class FormatError(NavproofError, ValueError):
    """Payload is not a JSON snapshot record (HTML error page, bad UTF-8, bad JSON)."""


class AllMirrorsExhaustedError(NetworkError):
    """Every mirror failed for a single content pointer."""

    def __init__(self, pointer: str, failures: list[Exception]):
        self.pointer = pointer
        self.failures = list(failures)
        self.last_error: Exception | None = self.failures[-1] if self.failures else None
        detail = f": {self.last_error}" if self.last_error is not None else ""
        super().__init__(f"All {len(self.failures)} mirrors failed for {pointer}{detail}")


class NoSnapshotsError(LookupError):
    """A batch of snapshots came back empty (absence of data, not a fault)."""
