"""In-process key-value store.

Holds values as-is (no serialization). Useful for tests and for callers that
only want the ordering behaviour within one process.
"""

import asyncio
from typing import Any


class MemoryStore:
    """In-memory async key-value store. Not shared between processes."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    async def read(self, key: str, type_: Any = Any) -> Any | None:
        """Return the stored object, or None. `type_` is ignored."""
        await asyncio.sleep(0)
        return self._data.get(key)

    async def write(self, key: str, value: Any) -> None:
        """Store value under key."""
        if value is None:
            raise ValueError(f"Cannot store None under {key!r}: None means 'not stored'")
        await asyncio.sleep(0)
        self._data[key] = value

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        await asyncio.sleep(0)
        self._data.pop(key, None)

    async def keys(self) -> list[str]:
        """List stored keys, sorted."""
        return sorted(self._data)

    def snapshot(self) -> dict[str, Any]:
        """Copy of the current contents (sync, for assertions)."""
        return dict(self._data)
