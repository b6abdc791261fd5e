"""Paired deletion of a cached value and its policy."""

import logging

from diskcached.core.caching.concurrency import gather_delay_error
from diskcached.core.caching.keys import compose_policy_key
from diskcached.core.errors import InvalidationError
from diskcached.core.store import KeyValueStore

logger = logging.getLogger(__name__)


async def invalidate(store: KeyValueStore, key: str) -> None:
    """
    Delete the value and the policy stored for key.

    Both deletions run concurrently and are always both attempted. Keys that
    are not stored are not an error.

    Raises:
        InvalidationError: If either deletion failed (carries every failure)
    """
    errors = await gather_delay_error(
        store.delete(key),
        store.delete(compose_policy_key(key)),
    )
    if errors:
        raise InvalidationError(key, errors) from errors[0]
    logger.debug(f"Invalidated {key!r}")
