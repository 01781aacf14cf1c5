"""Polishing stage (``polishing``): rumble removal and loudness normalization."""

from __future__ import annotations

from pathlib import Path

from .context import StageContext
from .transcoding import TranscodeInput, TranscodeJob

HIGHPASS_HZ = 80
LOUDNESS_TARGET_LUFS = -16
TRUE_PEAK_DB = -1.5
LOUDNESS_RANGE_LU = 11

POLISH_FILTERS: tuple[str, ...] = (
    f"highpass=f={HIGHPASS_HZ}",
    f"loudnorm=I={LOUDNESS_TARGET_LUFS}:TP={TRUE_PEAK_DB}:LRA={LOUDNESS_RANGE_LU}",
)


def polish_job(source: Path, output: Path) -> TranscodeJob:
    return TranscodeJob(
        label="polish",
        inputs=(TranscodeInput(str(source)),),
        output=output,
        audio_filters=POLISH_FILTERS,
    )


async def polish_track(ctx: StageContext, voice_track: Path) -> Path:
    polished_path = ctx.workspace.file("polished.wav")
    await ctx.engine.submit(polish_job(voice_track, polished_path))
    return polished_path


__all__ = ["POLISH_FILTERS", "polish_job", "polish_track"]
