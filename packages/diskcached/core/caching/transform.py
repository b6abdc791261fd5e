"""Read-through disk cache pipeline.

`transform()` turns a single-shot async producer into an async sequence
that yields the last cached value for a key (when its policy still holds)
followed by the freshly produced value.

Stages run in order, Cached then Fresh:
- A Cached stage failure is held back, so Fresh always runs and its entry is
  still delivered
- Held failures are raised after both stages ran; two failures are raised
  together as an ExceptionGroup
"""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from diskcached.core.caching.defaults import default_store
from diskcached.core.caching.models import Cached
from diskcached.core.caching.producer import request_fresh_value
from diskcached.core.caching.reader import request_cached_value
from diskcached.core.store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
V = TypeVar("V")
P = TypeVar("P")


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Settled result of one stage: an optional entry, or a held error."""

    entry: T | None = None
    error: Exception | None = None


async def settle(stage: Awaitable[T | None]) -> StageOutcome[T]:
    """Await a stage and capture its failure instead of raising it.

    Cancellation is not captured.
    """
    try:
        return StageOutcome(entry=await stage)
    except Exception as e:
        return StageOutcome(error=e)


def raise_held_errors(key: str, *outcomes: StageOutcome[Any]) -> None:
    """Raise the errors held by settled stages, if any."""
    errors = [outcome.error for outcome in outcomes if outcome.error is not None]
    if len(errors) == 1:
        raise errors[0]
    if errors:
        raise ExceptionGroup(f"Cached and fresh stages both failed for {key!r}", errors)


async def transform(
    producer: Callable[[], Awaitable[V]],
    key: str,
    store: KeyValueStore | None,
    policy_creator: Callable[[V], P],
    policy_validator: Callable[[P], bool],
    *,
    value_type: Any = Any,
    policy_type: Any = Any,
) -> AsyncIterator[Cached[V, P]]:
    """
    Yield the cached value for key (if still valid), then the fresh value.

    The cached entry, when there is one, is yielded before the producer
    starts. The producer always runs once the consumer asks for the next
    entry, whatever happened to the cached read. Nothing is deduplicated:
    concurrent calls for the same key each read, produce and write.

    Serializing stores such as `FSStore` hand back plain JSON data unless
    told the type. Without `policy_type`, a validator that expects a model
    (e.g. `lambda p: p.is_fresh(now)`) receives a dict, raises, and every
    read counts as invalid. `DiskCache.with_ttl` sets it for you.

    Args:
        producer: Zero-argument async callable computing the fresh value
        key: Base storage key (the policy lives under key + "_policy")
        store: Key-value store, or None for the default disk store
        policy_creator: Builds the policy stored with a fresh value
        policy_validator: Decides whether a stored policy still holds
        value_type: Expected value type (used by serializing stores)
        policy_type: Expected policy type (used by serializing stores)

    Yields:
        `Cached(from_cache=True)` entry (optional), then
        `Cached(from_cache=False)` entry

    Raises:
        Exception: The held Cached stage error and/or the Fresh stage error,
                   after all entries were yielded
        ExceptionGroup: If both stages failed

    Example:
        >>> create, validate = ttl_policy(300.0)
        >>> async for entry in transform(fetch_feed, "feed", store, create, validate):
        ...     render(entry.value, stale=entry.from_cache)
    """
    if store is None:
        store = default_store()

    cached: StageOutcome[Cached[V, P]] = await settle(
        request_cached_value(
            key,
            store,
            policy_validator,
            value_type=value_type,
            policy_type=policy_type,
        )
    )
    if cached.entry is not None:
        yield cached.entry
    elif cached.error is not None:
        logger.debug(f"Holding cached stage error for {key!r} until fresh stage completes")

    fresh: StageOutcome[Cached[V, P]] = await settle(
        request_fresh_value(producer, key, store, policy_creator)
    )
    if fresh.entry is not None:
        yield fresh.entry

    raise_held_errors(key, cached, fresh)
