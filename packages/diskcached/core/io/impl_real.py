"""On-disk filesystem for cache records, backed by aiofiles.

A record is never observed half-written: it is staged in a hidden sibling
file and swapped into place with a single rename.
"""

import contextlib
import time
from pathlib import Path

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]
import aiofiles.tempfile  # type: ignore[import-untyped]

from .models import AbsolutePath, WriteResult


class RealFileSystem:
    """
    Async access to the local disk.

    All paths handed out by `join` stay inside the base directory, so a
    cache key can never address a file outside the store root.
    """

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join parts onto base, refusing anything that escapes it."""
        root = Path(base).resolve()
        joined = root.joinpath(*parts).resolve()
        if not joined.is_relative_to(root):
            raise ValueError(f"Path traversal detected: {joined} escapes {base}")
        return AbsolutePath(joined)

    async def exists(self, path: AbsolutePath) -> bool:
        return bool(await aiofiles.os.path.exists(path))

    async def is_file(self, path: AbsolutePath) -> bool:
        return bool(await aiofiles.os.path.isfile(path))

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        async with aiofiles.open(path, encoding=encoding) as f:
            text: str = await f.read()
        return text

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Replace the file at path with content in one rename."""
        started = time.perf_counter()
        target = Path(path)
        await aiofiles.os.makedirs(target.parent, exist_ok=True)

        async with aiofiles.tempfile.NamedTemporaryFile(
            mode="w",
            encoding=encoding,
            dir=target.parent,
            prefix=f".{target.name}.",
            delete=False,
        ) as staging:
            staged = staging.name
            try:
                await staging.write(content)
            except BaseException:
                await staging.close()
                with contextlib.suppress(OSError):
                    await aiofiles.os.unlink(staged)
                raise

        try:
            await aiofiles.os.replace(staged, target)
        except BaseException:
            with contextlib.suppress(OSError):
                await aiofiles.os.unlink(staged)
            raise

        return WriteResult(
            path=str(path),
            bytes_written=len(content.encode(encoding)),
            duration_ms=(time.perf_counter() - started) * 1000,
        )

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        await aiofiles.os.makedirs(path, exist_ok=exist_ok)

    async def listdir(self, path: AbsolutePath) -> list[str]:
        names: list[str] = await aiofiles.os.listdir(path)
        return names

    async def remove(self, path: AbsolutePath, missing_ok: bool = False) -> None:
        """Delete the file at path; an absent file is an error unless missing_ok."""
        try:
            await aiofiles.os.unlink(path)
        except FileNotFoundError:
            if not missing_ok:
                raise
