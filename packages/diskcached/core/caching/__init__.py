"""Read-through disk caching for async producers.

`transform()` wraps a single-shot async producer so that callers first get
the value cached on disk for the same key (when its policy still holds) and
then the fresh value, which is persisted for the next call.

Key features:
- Cached entry strictly before fresh entry
- Value and policy stored side by side (`key`, `key + "_policy"`)
- Invalid or inconsistent entries deleted together
- Cache failures held back until the fresh value was delivered

Example:
    >>> from diskcached.core.caching import DiskCache, transform, ttl_policy
    >>>
    >>> create, validate = ttl_policy(300.0)
    >>> async for entry in transform(fetch_feed, "feed", store, create, validate):
    ...     print(entry.value, entry.from_cache)
"""

from diskcached.core.caching.cache import DiskCache
from diskcached.core.caching.concurrency import gather_delay_error
from diskcached.core.caching.defaults import default_store, reset_default_store
from diskcached.core.caching.invalidation import invalidate
from diskcached.core.caching.keys import POLICY_SUFFIX, compose_policy_key, is_policy_key
from diskcached.core.caching.models import Cached
from diskcached.core.caching.policies import TimestampPolicy, always_valid, ttl_policy
from diskcached.core.caching.producer import persist, request_fresh_value
from diskcached.core.caching.reader import passes_policy, request_cached_value
from diskcached.core.caching.transform import StageOutcome, transform

__all__ = [
    # Core
    "transform",
    "DiskCache",
    "Cached",
    # Stages
    "request_cached_value",
    "request_fresh_value",
    "invalidate",
    "persist",
    "passes_policy",
    "StageOutcome",
    # Keys
    "POLICY_SUFFIX",
    "compose_policy_key",
    "is_policy_key",
    # Policies
    "TimestampPolicy",
    "ttl_policy",
    "always_valid",
    # Wiring
    "default_store",
    "reset_default_store",
    # Utils
    "gather_delay_error",
]
