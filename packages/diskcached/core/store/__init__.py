"""Key-value stores for diskcached.

The cache pipeline only depends on the KeyValueStore protocol
(read / write / delete). Two backends ship with the package:
- FSStore: one JSON record per key on disk, via core.io
- MemoryStore: plain dict, for tests and single-process use

Example:
    >>> from diskcached.core.io import RealFileSystem, absolute_path
    >>> from diskcached.core.store import FSStore
    >>>
    >>> store = FSStore(RealFileSystem(), absolute_path("~/.cache/diskcached"))
    >>> await store.write("feed", {"items": [1, 2, 3]})
    >>> await store.read("feed")
    {'items': [1, 2, 3]}
"""

from diskcached.core.store.backends import FSStore, MemoryStore
from diskcached.core.store.models import StoreRecord
from diskcached.core.store.protocols import KeyValueStore

__all__ = [
    # Protocol
    "KeyValueStore",
    # Backends
    "FSStore",
    "MemoryStore",
    # Models
    "StoreRecord",
]
