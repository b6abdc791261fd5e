"""Models for the on-disk record format."""

from typing import Any

from pydantic import BaseModel, Field


class StoreRecord(BaseModel):
    """
    One stored key, serialized as a single JSON file.

    The raw key is kept inside the record because file names are sanitized
    and cannot be mapped back to keys.
    """

    key: str = Field(description="Raw storage key")
    written_at: float = Field(description="Unix timestamp (seconds) of the write")
    data: Any = Field(description="JSON-compatible encoding of the stored value")
