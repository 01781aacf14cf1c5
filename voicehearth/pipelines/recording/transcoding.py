"""Declarative transcoding jobs submitted to the engine.

A ``TranscodeJob`` describes inputs, filters and output options; the engine
adapter decides how to execute it. ``to_args`` renders the job as an ffmpeg
argument list (without the executable itself).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

CANONICAL_CHANNELS = 1
CANONICAL_SAMPLE_RATE = 44100
WAV_FORMAT = "wav"
MP3_FORMAT = "mp3"


def format_seconds(value: float) -> str:
    """Render seconds without float noise or a trailing ``.0`` (``3.0`` -> ``3``)."""

    rendered = f"{value:.6f}".rstrip("0").rstrip(".")
    return rendered or "0"


@dataclass(frozen=True)
class TranscodeInput:
    """One input source plus the options that must precede its ``-i``."""

    source: str
    options: tuple[str, ...] = ()

    def to_args(self) -> list[str]:
        return [*self.options, "-i", self.source]


@dataclass(frozen=True)
class TranscodeJob:
    """A single filter-graph invocation producing one output file."""

    label: str
    inputs: tuple[TranscodeInput, ...]
    output: Path
    output_format: str = WAV_FORMAT
    channels: int = CANONICAL_CHANNELS
    sample_rate: int = CANONICAL_SAMPLE_RATE
    audio_filters: tuple[str, ...] = ()
    filter_complex: tuple[str, ...] = ()
    maps: tuple[str, ...] = ()
    duration: float | None = None
    bitrate: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict)

    def to_args(self) -> list[str]:
        args: list[str] = ["-y"]
        for source in self.inputs:
            args.extend(source.to_args())
        if self.filter_complex:
            args.extend(["-filter_complex", ";".join(self.filter_complex)])
        for label in self.maps:
            args.extend(["-map", label])
        if self.audio_filters:
            args.extend(["-af", ",".join(self.audio_filters)])
        if self.duration is not None:
            args.extend(["-t", format_seconds(self.duration)])
        if self.bitrate:
            args.extend(["-b:a", self.bitrate])
        args.extend(["-ac", str(self.channels), "-ar", str(self.sample_rate)])
        for key, value in self.metadata.items():
            args.extend(["-metadata", f"{key}={value}"])
        args.extend(["-f", self.output_format, str(self.output)])
        return args


__all__ = [
    "CANONICAL_CHANNELS",
    "CANONICAL_SAMPLE_RATE",
    "MP3_FORMAT",
    "WAV_FORMAT",
    "TranscodeInput",
    "TranscodeJob",
    "format_seconds",
]
