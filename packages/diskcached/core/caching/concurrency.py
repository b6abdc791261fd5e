"""Run independent store operations together without losing failures."""

import asyncio
from collections.abc import Awaitable
from typing import Any


async def gather_delay_error(*aws: Awaitable[Any]) -> list[Exception]:
    """
    Run awaitables concurrently and wait for every one of them.

    A failing awaitable never cancels its siblings: each one is attempted and
    its failure collected. Cancellation and other BaseExceptions are not
    collected; the first one seen is re-raised after all awaitables finished.

    Args:
        *aws: Awaitables to run

    Returns:
        Failures in argument order (empty list when all succeeded)

    Example:
        >>> errors = await gather_delay_error(store.delete("a"), store.delete("b"))
        >>> if errors:
        ...     raise InvalidationError("a", errors) from errors[0]
    """
    results = await asyncio.gather(*aws, return_exceptions=True)

    errors: list[Exception] = []
    for result in results:
        if isinstance(result, Exception):
            errors.append(result)
        elif isinstance(result, BaseException):
            raise result
    return errors
