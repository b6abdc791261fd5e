"""Protocol for the key-value stores the cache pipeline persists into."""

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """
    Protocol for async key-value stores.

    All implementations must support:
    - `None` from `read()` meaning "nothing stored" (so `None` cannot be written)
    - Idempotent `delete()` (removing a missing key is not an error)
    - Independent keys (operations on different keys may run concurrently)
    """

    async def read(self, key: str, type_: Any = Any) -> Any | None:
        """
        Read the value stored under key.

        Args:
            key: Storage key
            type_: Expected type of the value. Stores that serialize values use
                   it to rebuild the caller's type; in-memory stores ignore it.

        Returns:
            Stored value, or None when nothing is stored

        Raises:
            StoreReadError: If a stored record cannot be decoded
            OSError: On I/O failure
        """
        ...

    async def write(self, key: str, value: Any) -> None:
        """
        Store value under key, replacing any previous value.

        Raises:
            ValueError: If value is None
            OSError: On I/O failure
        """
        ...

    async def delete(self, key: str) -> None:
        """Delete key. Deleting a key that is not stored succeeds."""
        ...
