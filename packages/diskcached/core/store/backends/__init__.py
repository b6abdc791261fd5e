from diskcached.core.store.backends.fs import FSStore
from diskcached.core.store.backends.memory import MemoryStore

__all__ = ["FSStore", "MemoryStore"]
