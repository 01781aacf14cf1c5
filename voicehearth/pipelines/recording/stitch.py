"""Stitching stage (``stitching``): join page clips with short pauses."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from fastapi.concurrency import run_in_threadpool

from .context import StageContext
from .transcoding import (
    CANONICAL_CHANNELS,
    CANONICAL_SAMPLE_RATE,
    TranscodeInput,
    TranscodeJob,
)

PAGE_GAP_SECONDS = 0.75


def build_concat_manifest(clips: Sequence[Path], silence: Path) -> list[Path]:
    """Interleave one silence clip between consecutive pages, keeping page order."""

    entries: list[Path] = []
    for position, clip in enumerate(clips):
        if position:
            entries.append(silence)
        entries.append(clip)
    return entries


def _quote_concat_path(path: Path) -> str:
    # concat demuxer syntax: close the quote, emit an escaped quote, reopen.
    return "'" + str(path).replace("'", "'\\''") + "'"


def render_concat_manifest(entries: Sequence[Path]) -> str:
    return "\n".join(f"file {_quote_concat_path(entry)}" for entry in entries)


def silence_job(output: Path) -> TranscodeJob:
    source = f"anullsrc=r={CANONICAL_SAMPLE_RATE}:cl=mono"
    return TranscodeJob(
        label="silence",
        inputs=(TranscodeInput(source, options=("-f", "lavfi")),),
        output=output,
        duration=PAGE_GAP_SECONDS,
        channels=CANONICAL_CHANNELS,
    )


def concat_job(manifest: Path, output: Path) -> TranscodeJob:
    return TranscodeJob(
        label="concatenate",
        inputs=(TranscodeInput(str(manifest), options=("-f", "concat", "-safe", "0")),),
        output=output,
    )


async def stitch_pages(ctx: StageContext, clips: Sequence[Path]) -> Path:
    """Produce one continuous voice track from the normalized page clips."""

    silence_path = ctx.workspace.file("silence.wav")
    await ctx.engine.submit(silence_job(silence_path))

    manifest_path = ctx.workspace.file("concat.txt")
    manifest = render_concat_manifest(build_concat_manifest(clips, silence_path))
    await run_in_threadpool(manifest_path.write_text, manifest, encoding="utf-8")

    concatenated_path = ctx.workspace.file("concatenated.wav")
    await ctx.engine.submit(concat_job(manifest_path, concatenated_path))
    return concatenated_path


__all__ = [
    "PAGE_GAP_SECONDS",
    "build_concat_manifest",
    "concat_job",
    "render_concat_manifest",
    "silence_job",
    "stitch_pages",
]
