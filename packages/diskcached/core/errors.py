"""Exception hierarchy for diskcached.

Expected cache-miss conditions (absent or invalid policy) never raise; these
errors cover store inconsistencies and I/O faults that reach the caller.
"""

from collections.abc import Sequence


class DiskCacheError(Exception):
    """Base class for all diskcached errors."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class CacheInconsistencyError(DiskCacheError):
    """A valid policy was found but its paired value is missing."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Policy for {key!r} is valid but no value is stored", key=key)


class StoreReadError(DiskCacheError):
    """A stored record exists but cannot be decoded."""


class _AggregateError(DiskCacheError):
    """Failures of a concurrent pair of store operations."""

    operation = "operation"

    def __init__(self, key: str, errors: Sequence[BaseException]) -> None:
        self.errors = list(errors)
        details = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(
            f"{len(self.errors)} {self.operation} failure(s) for {key!r}: {details}", key=key
        )


class StoreWriteError(_AggregateError):
    """Persisting a fresh value or its policy failed."""

    operation = "write"


class InvalidationError(_AggregateError):
    """Deleting a value or its policy failed."""

    operation = "delete"
