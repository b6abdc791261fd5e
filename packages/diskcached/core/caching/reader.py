"""Cached stage: replay the stored value for a key when its policy holds."""

import logging
from collections.abc import Callable
from typing import Any

from diskcached.core.caching.invalidation import invalidate
from diskcached.core.caching.keys import compose_policy_key
from diskcached.core.caching.models import Cached
from diskcached.core.errors import CacheInconsistencyError, InvalidationError
from diskcached.core.store import KeyValueStore

logger = logging.getLogger(__name__)


def passes_policy(key: str, policy: Any, validator: Callable[[Any], bool]) -> bool:
    """
    Apply the caller's validator to a stored policy.

    A validator that raises is treated exactly like one returning False.
    """
    try:
        return bool(validator(policy))
    except Exception:
        logger.warning(
            f"Policy validator raised for {key!r} on a {type(policy).__name__} policy; "
            "treating as invalid (pass policy_type if the store decodes to plain data)",
            exc_info=True,
        )
        return False


async def _invalidate_after_error(store: KeyValueStore, key: str, error: Exception) -> None:
    """Clean up after a failed read. The original error keeps precedence."""
    logger.warning(f"Cache miss: {key!r} ({type(error).__name__}: {error})")
    try:
        await invalidate(store, key)
    except InvalidationError as cleanup_error:
        logger.error(f"Cleanup after failed read of {key!r} also failed: {cleanup_error}")
        error.add_note(f"Invalidation of {key!r} also failed: {cleanup_error}")


async def request_cached_value(
    key: str,
    store: KeyValueStore,
    policy_validator: Callable[[Any], bool],
    *,
    value_type: Any = Any,
    policy_type: Any = Any,
) -> Cached[Any, Any] | None:
    """
    Read the cached entry for key if its policy is still valid.

    Workflow:
    1. Read the policy; nothing stored → None (cold cache)
    2. Validate it; invalid → invalidate value and policy, then None
    3. Read the value paired with the valid policy
    4. Return it as a `from_cache=True` entry

    Args:
        key: Base storage key
        store: Key-value store
        policy_validator: Predicate deciding whether the stored policy holds
        value_type: Expected value type (used by serializing stores)
        policy_type: Expected policy type (used by serializing stores)

    Returns:
        Cached entry, or None on a cold cache or invalid policy

    Raises:
        CacheInconsistencyError: Valid policy but no stored value
        InvalidationError: Invalidating an invalid policy failed
        Exception: Any store read failure, re-raised after invalidation
    """
    try:
        policy = await store.read(compose_policy_key(key), policy_type)
    except Exception as e:
        await _invalidate_after_error(store, key, e)
        raise

    if policy is None:
        logger.debug(f"Cache empty: {key!r}")
        return None

    if not passes_policy(key, policy, policy_validator):
        await invalidate(store, key)
        logger.info(f"Cache invalid: {key!r}")
        return None

    try:
        value = await store.read(key, value_type)
        if value is None:
            raise CacheInconsistencyError(key)
    except Exception as e:
        await _invalidate_after_error(store, key, e)
        raise

    logger.debug(f"Cache hit: {key!r}")
    return Cached(value=value, policy=policy, from_cache=True)
