"""Filesystem-backed key-value store using core.io for all operations."""

import asyncio
import functools
import logging
import time
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

from diskcached.core.errors import StoreReadError
from diskcached.core.io import AbsolutePath, FileSystem, key_filename
from diskcached.core.store.models import StoreRecord

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=128)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


class FSStore:
    """
    Async filesystem-backed key-value store.

    Each key is one JSON file under `root` holding a StoreRecord. Values are
    encoded with pydantic, so models, dataclasses and builtins round-trip
    when read back with their type.

    The store lazily creates its root on first use.
    """

    def __init__(self, fs: FileSystem, root: AbsolutePath) -> None:
        """
        Initialize filesystem store.

        Args:
            fs: Async filesystem implementation
            root: Absolute path to the store directory
        """
        self.fs = fs
        self.root = root
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """
        Ensure the root directory exists.

        Called automatically on first use. Safe to call multiple times.
        """
        async with self._init_lock:
            if not self._initialized:
                await self.fs.mkdirs(self.root, exist_ok=True)
                self._initialized = True

    def path_for(self, key: str) -> AbsolutePath:
        """Compute the record path for key (sync)."""
        return self.fs.join(self.root, key_filename(key))

    async def _load_record(self, path: AbsolutePath, key: str | None = None) -> StoreRecord:
        try:
            raw = await self.fs.read_text(path)
        except UnicodeDecodeError as e:
            raise StoreReadError(f"Undecodable record at {path}: {e}", key=key) from e
        try:
            return StoreRecord.model_validate_json(raw)
        except ValidationError as e:
            raise StoreReadError(f"Corrupt record at {path}: {e}", key=key) from e

    async def read(self, key: str, type_: Any = Any) -> Any | None:
        """Read and decode the value stored under key (async)."""
        await self.initialize()
        path = self.path_for(key)

        try:
            record = await self._load_record(path, key)
        except FileNotFoundError:
            return None

        if record.key != key:
            raise StoreReadError(f"Record at {path} belongs to {record.key!r}", key=key)
        if record.data is None:
            return None

        try:
            return _adapter(type_).validate_python(record.data)
        except ValidationError as e:
            raise StoreReadError(
                f"Stored value for {key!r} does not match {type_!r}: {e}", key=key
            ) from e

    async def write(self, key: str, value: Any) -> None:
        """Encode and atomically write value under key (async)."""
        if value is None:
            raise ValueError(f"Cannot store None under {key!r}: None means 'not stored'")
        await self.initialize()

        record = StoreRecord(
            key=key,
            written_at=time.time(),
            data=to_jsonable_python(value),
        )
        result = await self.fs.write_text(self.path_for(key), record.model_dump_json())
        logger.debug(f"Stored {key!r} ({result.bytes_written} bytes)")

    async def delete(self, key: str) -> None:
        """Remove the record for key; missing keys are ignored (async)."""
        await self.initialize()
        await self.fs.remove(self.path_for(key), missing_ok=True)

    async def keys(self) -> list[str]:
        """
        List stored keys, sorted (async).

        Records that vanish or cannot be decoded while listing are skipped
        with a warning.
        """
        await self.initialize()
        names = await self.fs.listdir(self.root)
        paths = [self.fs.join(self.root, name) for name in names if name.endswith(".json")]
        results = await asyncio.gather(
            *(self._load_record(path) for path in paths), return_exceptions=True
        )

        keys: list[str] = []
        for path, result in zip(paths, results, strict=True):
            if isinstance(result, StoreRecord):
                keys.append(result.key)
            elif isinstance(result, (FileNotFoundError, StoreReadError)):
                logger.warning(f"Skipping unreadable record {path}: {result}")
            else:
                raise result
        return sorted(keys)
