"""Ready-made policies.

The pipeline treats policies as opaque; these helpers cover the common
"created at + time to live" case.
"""

import time
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TimestampPolicy(BaseModel):
    """Expiry policy: valid until `created_at + ttl_seconds`."""

    model_config = ConfigDict(frozen=True)

    created_at: float = Field(description="Unix timestamp (seconds) of the fresh value")
    ttl_seconds: float | None = Field(
        default=None, ge=0.0, description="Time to live in seconds (None = never expires)"
    )

    @property
    def expires_at(self) -> float | None:
        if self.ttl_seconds is None:
            return None
        return self.created_at + self.ttl_seconds

    def is_fresh(self, now: float | None = None) -> bool:
        """Check whether the policy still holds at `now` (default: current time)."""
        expires_at = self.expires_at
        if expires_at is None:
            return True
        return (time.time() if now is None else now) <= expires_at


def ttl_policy(
    ttl_seconds: float | None,
    clock: Callable[[], float] = time.time,
) -> tuple[Callable[[Any], TimestampPolicy], Callable[[Any], bool]]:
    """
    Build a (policy_creator, policy_validator) pair for a fixed TTL.

    The validator accepts TimestampPolicy instances as well as their dict
    form, so it also works with stores read without a `policy_type`.

    Example:
        >>> create, validate = ttl_policy(60.0)
        >>> validate(create("value"))
        True
    """

    def create(_value: Any) -> TimestampPolicy:
        return TimestampPolicy(created_at=clock(), ttl_seconds=ttl_seconds)

    def validate(policy: Any) -> bool:
        return TimestampPolicy.model_validate(policy).is_fresh(clock())

    return create, validate


def always_valid(_policy: Any) -> bool:
    """Validator that accepts every stored policy."""
    return True
