"""Background music stage (``mixing_music``).

Only entered when the request names a music track. An unreachable track is
not an error: the stage logs it and hands back ``None`` so the encoder uses
the polished voice track as-is.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool

from voicehearth.telemetry import record_music_fallback

from .context import StageContext
from .errors import DownloadError, MusicFetchFailure
from .transcoding import TranscodeInput, TranscodeJob, format_seconds
from .types import MUSIC_VOLUME

logger = logging.getLogger("voicehearth.pipeline")

FADE_IN_SECONDS = 3
FADE_OUT_SECONDS = 5
MIX_DROPOUT_TRANSITION_SECONDS = 2


def resolve_music_url(base_url: str | None, music_track: str) -> str:
    if not base_url:
        raise MusicFetchFailure("Music base URL is not configured")
    return f"{base_url.rstrip('/')}/music/{quote(music_track, safe='')}.mp3"


def fade_out_start(voice_duration: float) -> float:
    return max(0.0, voice_duration - FADE_OUT_SECONDS)


def build_music_filter_graph(voice_duration: float) -> tuple[str, ...]:
    """Loop, trim, fade and attenuate input 1 to a tenth, then mix it under input 0.

    ``duration=first`` keeps the mix exactly as long as the voice track.
    """

    duration = format_seconds(voice_duration)
    music_chain = ",".join(
        (
            "aloop=loop=-1:size=2e+09",
            f"atrim=duration={duration}",
            f"afade=t=in:st=0:d={FADE_IN_SECONDS}",
            f"afade=t=out:st={format_seconds(fade_out_start(voice_duration))}:d={FADE_OUT_SECONDS}",
            f"volume={format_seconds(MUSIC_VOLUME)}",
        )
    )
    return (
        f"[1:a]{music_chain}[music]",
        "[0:a][music]amix=inputs=2:duration=first"
        f":dropout_transition={MIX_DROPOUT_TRANSITION_SECONDS}[out]",
    )


def mix_job(
    voice_track: Path,
    music_path: Path,
    output: Path,
    voice_duration: float,
) -> TranscodeJob:
    return TranscodeJob(
        label="mix music",
        inputs=(TranscodeInput(str(voice_track)), TranscodeInput(str(music_path))),
        output=output,
        filter_complex=build_music_filter_graph(voice_duration),
        maps=("[out]",),
    )


async def fetch_music(ctx: StageContext, music_track: str) -> Path:
    """Download the selected track into the workspace or raise MusicFetchFailure."""

    url = resolve_music_url(ctx.music_base_url, music_track)
    try:
        payload = await ctx.fetcher.fetch(url)
    except DownloadError as exc:
        raise MusicFetchFailure(f"Music track '{music_track}' is unavailable: {exc}") from exc

    music_path = ctx.workspace.file("music.mp3")
    await run_in_threadpool(music_path.write_bytes, payload)
    return music_path


async def mix_music(
    ctx: StageContext,
    voice_track: Path,
    music_track: str,
) -> Path | None:
    """Return the mixed track, or ``None`` when the music could not be fetched."""

    try:
        music_path = await fetch_music(ctx, music_track)
    except MusicFetchFailure as exc:
        logger.warning("Continuing without background music: %s", exc)
        record_music_fallback()
        return None

    voice_duration = await ctx.engine.probe_duration(voice_track)
    mixed_path = ctx.workspace.file("mixed.wav")
    await ctx.engine.submit(mix_job(voice_track, music_path, mixed_path, voice_duration))
    logger.info(
        "Mixed music track %s under %.2fs of narration", music_track, voice_duration
    )
    return mixed_path


__all__ = [
    "build_music_filter_graph",
    "fade_out_start",
    "fetch_music",
    "mix_job",
    "mix_music",
    "resolve_music_url",
]
