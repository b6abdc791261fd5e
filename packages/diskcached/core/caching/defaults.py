"""Default store wiring.

Callers that do not pass a store get one FSStore on the real filesystem,
rooted at the configured cache directory. Built on first use.
"""

import logging

from diskcached.core.config import DiskCacheConfig, load_app_config
from diskcached.core.io import RealFileSystem, absolute_path
from diskcached.core.store import FSStore

logger = logging.getLogger(__name__)

_default_store: FSStore | None = None


def default_store(config: DiskCacheConfig | None = None) -> FSStore:
    """Return the shared default store, creating it from config on first call."""
    global _default_store

    if _default_store is None:
        config = config or load_app_config()
        _default_store = FSStore(RealFileSystem(), absolute_path(config.root))
        logger.debug(f"Default store rooted at {_default_store.root}")
    return _default_store


def reset_default_store() -> None:
    """Forget the default store (the next call rebuilds it from config)."""
    global _default_store
    _default_store = None
