"""Path and result types shared by the filesystem implementations."""

from pathlib import Path
from typing import NewType

from pydantic import BaseModel, Field

AbsolutePath = NewType("AbsolutePath", Path)


def absolute_path(path: str | Path) -> AbsolutePath:
    """
    Normalize a user-supplied location into an `AbsolutePath`.

    `~` is expanded and the result is resolved, so config values such as
    `~/.cache/diskcached` or `./cache` both become usable store roots.

    Example:
        >>> absolute_path("~/.cache/diskcached").is_absolute()
        True
    """
    resolved = Path(path).expanduser().resolve()
    if not resolved.is_absolute():
        raise ValueError(f"Path must be absolute: {path}")
    return AbsolutePath(resolved)


class WriteResult(BaseModel):
    """What a record write reported back."""

    path: str = Field(description="File the record now lives in")
    bytes_written: int = Field(description="Encoded size of the record", ge=0)
    duration_ms: float = Field(description="Wall time of the write, in milliseconds", ge=0.0)
