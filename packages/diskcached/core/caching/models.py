"""Models for cache pipeline results."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

V = TypeVar("V")
P = TypeVar("P")


class Cached(BaseModel, Generic[V, P]):
    """
    One emission of the cache pipeline.

    A value together with the policy it was stored (or is about to be stored)
    with. `from_cache` tells a replayed disk value apart from a freshly
    produced one. Immutable once constructed.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: V = Field(description="Cached or freshly produced value")
    policy: P = Field(description="Caller-defined validity metadata for the value")
    from_cache: bool = Field(description="True when read from the store, False when fresh")
