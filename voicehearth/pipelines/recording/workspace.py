"""Per-session scratch directories and in-process session leases."""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections import defaultdict
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger("voicehearth.pipeline")

_FORBIDDEN_SESSION_CHARS = ("/", "\\", "\x00")


def validate_session_id(session_id: str) -> str:
    """Ensure the session id is usable as a single directory name."""

    cleaned = (session_id or "").strip()
    if not cleaned:
        raise ValueError("session_id is required")
    if cleaned in {".", ".."} or any(char in cleaned for char in _FORBIDDEN_SESSION_CHARS):
        raise ValueError(f"Invalid session_id '{session_id}'")
    return cleaned


class Workspace:
    """Scratch directory owned by one pipeline run.

    Used as ``async with Workspace(root, session) as ws`` followed by
    ``await ws.prepare()``. Leaving the block removes whatever ``prepare``
    created; removal errors are ignored.
    """

    def __init__(self, root: str | Path, session_id: str) -> None:
        self._root = Path(root)
        self._session_id = session_id
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Workspace has not been prepared")
        return self._path

    def file(self, name: str) -> Path:
        return self.path / name

    async def prepare(self) -> Path:
        session_id = validate_session_id(self._session_id)
        path = self._root / session_id
        # Leftovers from a crashed run would otherwise leak into the manifest.
        await run_in_threadpool(shutil.rmtree, path, ignore_errors=True)
        await run_in_threadpool(path.mkdir, parents=True, exist_ok=True)
        self._path = path
        return path

    async def release(self) -> None:
        if self._path is None:
            return
        path, self._path = self._path, None
        await run_in_threadpool(shutil.rmtree, path, ignore_errors=True)
        logger.debug("Removed workspace %s", path)

    async def __aenter__(self) -> "Workspace":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()


class SessionLeases:
    """Serialize pipeline runs that target the same session in this process."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: defaultdict[str, int] = defaultdict(int)

    def is_held(self, session_id: str) -> bool:
        lock = self._locks.get(session_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, session_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._holders[session_id] += 1
        try:
            if lock.locked():
                logger.info("Waiting for in-flight run of session %s", session_id)
            async with lock:
                yield
        finally:
            self._holders[session_id] -= 1
            if not self._holders[session_id]:
                del self._holders[session_id]
                self._locks.pop(session_id, None)


__all__ = ["SessionLeases", "Workspace", "validate_session_id"]
