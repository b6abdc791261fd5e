"""In-memory filesystem for fast, isolated testing.

Simulates filesystem operations without disk I/O. Operations yield to the
event loop once so concurrent callers interleave the way they would on disk.
"""

import asyncio
from collections.abc import Iterable
from pathlib import Path

from .models import AbsolutePath, WriteResult


class FakeFileSystem:
    """
    In-memory async filesystem for testing.

    Failures can be injected per path and per operation with `fail_on()`;
    every call is recorded in `calls` as `(operation, path)`.
    Not thread-safe (use per-test instance).
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = {"/"}
        self._failures: dict[tuple[str, str], BaseException] = {}
        self.calls: list[tuple[str, str]] = []

    def fail_on(
        self,
        operation: str,
        path: AbsolutePath | str,
        error: BaseException | None = None,
    ) -> None:
        """Make `operation` ("read", "write", "remove", "listdir") on `path` raise."""
        self._failures[(operation, str(Path(path)))] = error or OSError(
            f"Injected {operation} failure: {path}"
        )

    def clear_failures(self) -> None:
        self._failures.clear()

    async def _enter(self, operation: str, path: AbsolutePath) -> str:
        path_str = str(Path(path))
        self.calls.append((operation, path_str))
        await asyncio.sleep(0)
        error = self._failures.get((operation, path_str))
        if error is not None:
            raise error
        return path_str

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        result = Path(base).joinpath(*parts)

        if not result.is_absolute():
            result = Path("/") / result

        return AbsolutePath(result)

    async def exists(self, path: AbsolutePath) -> bool:
        """Check existence without recording a call."""
        path_str = str(Path(path))
        return path_str in self._files or path_str in self._dirs

    async def is_file(self, path: AbsolutePath) -> bool:
        """Check for a file without recording a call."""
        return str(Path(path)) in self._files

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        path_str = await self._enter("read", path)
        if path_str not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._files[path_str]

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Store content; parent directories spring into existence."""
        path_str = await self._enter("write", path)
        self._ensure_parents(Path(path_str).parent.parts)
        self._files[path_str] = content

        return WriteResult(
            path=path_str,
            bytes_written=len(content.encode(encoding)),
            duration_ms=0.0,
        )

    def _ensure_parents(self, parts: Iterable[str]) -> None:
        """Create every ancestor directory (sync helper)."""
        parts = tuple(parts)
        for i in range(1, len(parts) + 1):
            self._dirs.add(str(Path(*parts[:i])))

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create directory and parents."""
        path_str = str(Path(path))
        if not exist_ok and path_str in self._dirs:
            raise FileExistsError(f"Directory exists: {path}")
        self._ensure_parents(Path(path).parts)

    async def listdir(self, path: AbsolutePath) -> list[str]:
        """List immediate children, sorted."""
        path_str = await self._enter("listdir", path)
        if path_str not in self._dirs:
            raise FileNotFoundError(f"Directory not found: {path}")

        parent = Path(path_str)
        children = {Path(p).name for p in self._files if Path(p).parent == parent}
        children.update(
            Path(d).name for d in self._dirs if d != path_str and Path(d).parent == parent
        )
        return sorted(children)

    async def remove(self, path: AbsolutePath, missing_ok: bool = False) -> None:
        path_str = await self._enter("remove", path)
        if path_str not in self._files:
            if missing_ok:
                return
            raise FileNotFoundError(f"File not found: {path}")
        del self._files[path_str]

    def files(self) -> dict[str, str]:
        """Snapshot of stored files keyed by path (for assertions)."""
        return dict(self._files)
