"""Reusable cache bound to one store and one policy pair."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Generic, Self, TypeVar

from diskcached.core.caching.defaults import default_store
from diskcached.core.caching.invalidation import invalidate
from diskcached.core.caching.models import Cached
from diskcached.core.caching.policies import TimestampPolicy, ttl_policy
from diskcached.core.caching.transform import transform
from diskcached.core.config import load_app_config
from diskcached.core.store import KeyValueStore

logger = logging.getLogger(__name__)

V = TypeVar("V")
P = TypeVar("P")


class DiskCache(Generic[V, P]):
    """
    Cache pipeline with store, policy creator and validator bound once.

    Equivalent to calling `transform()` with the same arguments every time,
    for call sites that cache many keys with the same value and policy types.

    Example:
        >>> cache = DiskCache(store, create, validate, value_type=Feed)
        >>> async for entry in cache.transform(fetch_feed, "feed"):
        ...     render(entry.value)
    """

    def __init__(
        self,
        store: KeyValueStore | None,
        policy_creator: Callable[[V], P],
        policy_validator: Callable[[P], bool],
        *,
        value_type: Any = Any,
        policy_type: Any = Any,
    ) -> None:
        """
        Initialize cache.

        Args:
            store: Key-value store, or None for the default disk store
            policy_creator: Builds the policy stored with a fresh value
            policy_validator: Decides whether a stored policy still holds
            value_type: Expected value type (used by serializing stores)
            policy_type: Expected policy type (used by serializing stores)
        """
        self.store = store if store is not None else default_store()
        self.policy_creator = policy_creator
        self.policy_validator = policy_validator
        self.value_type = value_type
        self.policy_type = policy_type

    @classmethod
    def with_ttl(
        cls,
        ttl_seconds: float | None = None,
        store: KeyValueStore | None = None,
        *,
        value_type: Any = Any,
    ) -> Self:
        """
        Build a cache whose entries expire `ttl_seconds` after being produced.

        When ttl_seconds is None the configured `default_ttl_seconds` applies
        (which may itself be None: never expire).
        """
        if ttl_seconds is None:
            ttl_seconds = load_app_config().default_ttl_seconds
        creator, validator = ttl_policy(ttl_seconds)
        return cls(
            store,
            creator,
            validator,
            value_type=value_type,
            policy_type=TimestampPolicy,
        )

    def transform(
        self, producer: Callable[[], Awaitable[V]], key: str
    ) -> AsyncIterator[Cached[V, P]]:
        """Yield the cached value for key (if still valid), then the fresh value."""
        return transform(
            producer,
            key,
            self.store,
            self.policy_creator,
            self.policy_validator,
            value_type=self.value_type,
            policy_type=self.policy_type,
        )

    async def latest(self, producer: Callable[[], Awaitable[V]], key: str) -> Cached[V, P]:
        """
        Run the whole pipeline and return the fresh entry.

        The cache is still read and refreshed, and errors are raised exactly
        as when iterating `transform()`.
        """
        entries = [entry async for entry in self.transform(producer, key)]
        return entries[-1]

    async def invalidate(self, key: str) -> None:
        """Delete the value and policy stored for key."""
        await invalidate(self.store, key)
        logger.debug(f"Invalidated {key!r} on request")
