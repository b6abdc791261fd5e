"""Filesystem abstraction layer for diskcached.

Provides async-first filesystem operations used by the disk-backed store.

Example:
    >>> from diskcached.core.io import RealFileSystem, absolute_path
    >>> fs = RealFileSystem()
    >>> path = fs.join(absolute_path("/tmp"), "diskcached", "entry.json")
    >>> await fs.write_text(path, "{}")
    >>> content = await fs.read_text(path)
"""

from .impl_fake import FakeFileSystem
from .impl_real import RealFileSystem
from .models import AbsolutePath, WriteResult, absolute_path
from .protocols import FileSystem
from .utils import key_filename, sanitize_path_component

__all__ = [
    # Path types and constructors
    "AbsolutePath",
    "absolute_path",
    # Result types
    "WriteResult",
    # Protocols
    "FileSystem",
    # Implementations
    "RealFileSystem",
    "FakeFileSystem",
    # Utilities
    "key_filename",
    "sanitize_path_component",
]
