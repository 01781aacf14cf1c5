"""Publishing stage (``uploading``): store the finished MP3."""

from __future__ import annotations

from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from .context import StageContext

ARTIFACT_CONTENT_TYPE = "audio/mpeg"


def artifact_key(session_id: str) -> str:
    """Deterministic key so re-processing a session overwrites the previous track."""

    return f"processed/{session_id}.mp3"


async def publish_track(ctx: StageContext, session_id: str, mp3_path: Path) -> str:
    key = artifact_key(session_id)
    data = await run_in_threadpool(mp3_path.read_bytes)
    await ctx.artifacts.upload(key, data, ARTIFACT_CONTENT_TYPE)
    return key


__all__ = ["ARTIFACT_CONTENT_TYPE", "artifact_key", "publish_track"]
