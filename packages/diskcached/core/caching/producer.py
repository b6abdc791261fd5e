"""Fresh stage: run the producer and persist its value with a new policy."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from diskcached.core.caching.concurrency import gather_delay_error
from diskcached.core.caching.keys import compose_policy_key
from diskcached.core.caching.models import Cached
from diskcached.core.errors import StoreWriteError
from diskcached.core.store import KeyValueStore

logger = logging.getLogger(__name__)

V = TypeVar("V")
P = TypeVar("P")


async def persist(store: KeyValueStore, key: str, entry: Cached[Any, Any]) -> None:
    """
    Write an entry's value and policy concurrently.

    Both writes are always attempted.

    Raises:
        StoreWriteError: If either write failed (carries every failure)
    """
    errors = await gather_delay_error(
        store.write(key, entry.value),
        store.write(compose_policy_key(key), entry.policy),
    )
    if errors:
        raise StoreWriteError(key, errors) from errors[0]


async def request_fresh_value(
    producer: Callable[[], Awaitable[V]],
    key: str,
    store: KeyValueStore,
    policy_creator: Callable[[V], P],
) -> Cached[V, P]:
    """
    Produce a fresh value, attach a new policy and persist both.

    The producer runs exactly once. The entry is returned only after both
    writes are acknowledged. When the producer (or the policy creator) fails,
    nothing is written.

    Args:
        producer: Zero-argument async callable computing the value
        key: Base storage key
        store: Key-value store
        policy_creator: Builds the policy for a freshly produced value

    Returns:
        Entry with `from_cache=False`

    Raises:
        ValueError: If the producer returned None (it cannot be stored)
        StoreWriteError: If persisting failed
        Exception: Whatever the producer or policy creator raised
    """
    start = time.perf_counter()
    value = await producer()
    compute_ms = (time.perf_counter() - start) * 1000

    if value is None:
        raise ValueError(f"Producer for {key!r} returned None, which cannot be cached")

    entry: Cached[V, P] = Cached(value=value, policy=policy_creator(value), from_cache=False)
    await persist(store, key, entry)

    logger.debug(f"Fresh value stored: {key!r} (computed in {compute_ms:.1f} ms)")
    return entry
