"""Download + normalize stage (``downloading``) of the recording pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from .context import StageContext
from .errors import DownloadError, NoPagesError
from .interfaces import SIGNED_URL_TTL_SECONDS
from .transcoding import TranscodeInput, TranscodeJob
from .types import RecordingPage

logger = logging.getLogger("voicehearth.pipeline")


async def load_pages(ctx: StageContext, session_id: str) -> list[RecordingPage]:
    """Fetch the ordered page list, refusing sessions without usable audio."""

    pages = list(await ctx.pages.list_pages(session_id))
    if not pages:
        raise NoPagesError("No recording pages found for session")
    logger.info("Session %s has %d recorded pages", session_id, len(pages))
    return pages


def normalize_job(raw_path: Path, wav_path: Path) -> TranscodeJob:
    return TranscodeJob(
        label=f"normalize {raw_path.name}",
        inputs=(TranscodeInput(str(raw_path)),),
        output=wav_path,
    )


async def download_page(ctx: StageContext, page: RecordingPage) -> Path:
    """Fetch one page's raw upload into the workspace and return its path."""

    try:
        url = await ctx.pages.signed_download(page.audio_ref, SIGNED_URL_TTL_SECONDS)
    except DownloadError as exc:
        raise DownloadError(f"Failed to get signed URL for page {page.index}") from exc
    if not url:
        raise DownloadError(f"Failed to get signed URL for page {page.index}")

    try:
        payload = await ctx.fetcher.fetch(url)
    except DownloadError as exc:
        raise DownloadError(f"Failed to download page {page.index}") from exc

    raw_path = ctx.workspace.file(f"page-{page.index}.raw")
    await run_in_threadpool(raw_path.write_bytes, payload)
    return raw_path


async def normalize_pages(ctx: StageContext, pages: list[RecordingPage]) -> list[Path]:
    """Download every page and convert it to a canonical mono 44.1 kHz WAV clip.

    Pages are processed strictly in the given order; the first failure aborts
    the stage.
    """

    clips: list[Path] = []
    for page in pages:
        raw_path = await download_page(ctx, page)
        wav_path = ctx.workspace.file(f"page-{page.index}.wav")
        await ctx.engine.submit(normalize_job(raw_path, wav_path))
        clips.append(wav_path)
    return clips


__all__ = ["download_page", "load_pages", "normalize_job", "normalize_pages"]
