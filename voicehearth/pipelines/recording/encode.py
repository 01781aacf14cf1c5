"""Encoding stage (``encoding``): compress the final mix to tagged MP3."""

from __future__ import annotations

from pathlib import Path

from .context import StageContext
from .transcoding import MP3_FORMAT, TranscodeInput, TranscodeJob

MP3_BITRATE = "192k"
ALBUM_LABEL = "VoiceHearth"


def build_metadata(story_title: str, reader_name: str | None = None) -> dict[str, str]:
    metadata = {"title": story_title, "album": ALBUM_LABEL}
    if reader_name:
        metadata["artist"] = f"Read by {reader_name}"
    return metadata


def encode_job(
    source: Path,
    output: Path,
    story_title: str,
    reader_name: str | None = None,
) -> TranscodeJob:
    return TranscodeJob(
        label="encode mp3",
        inputs=(TranscodeInput(str(source)),),
        output=output,
        output_format=MP3_FORMAT,
        bitrate=MP3_BITRATE,
        metadata=build_metadata(story_title, reader_name),
    )


async def encode_track(
    ctx: StageContext,
    source: Path,
    story_title: str,
    reader_name: str | None = None,
) -> Path:
    mp3_path = ctx.workspace.file("output.mp3")
    await ctx.engine.submit(encode_job(source, mp3_path, story_title, reader_name))
    return mp3_path


__all__ = ["ALBUM_LABEL", "MP3_BITRATE", "build_metadata", "encode_job", "encode_track"]
