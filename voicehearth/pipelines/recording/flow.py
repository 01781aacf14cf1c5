"""Execution order of the recording pipeline.

The orchestrator walks ``plan_steps`` and dispatches each step to the stage
module listed here:

1. ``normalize`` – list pages, download each upload, convert to mono 44.1 kHz WAV.
2. ``stitch`` – generate a 0.75 s pause and concatenate pages around it.
3. ``polish`` – high-pass at 80 Hz, then EBU R128 loudness normalization.
4. ``music`` – optional: loop, fade and duck a background track under the voice.
5. ``encode`` – 192 kbps MP3 with title/album/artist tags.
6. ``publish`` – upload to ``processed/{session}.mp3``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .types import ProcessingStep


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the recording pipeline."""

    order: int
    step: ProcessingStep
    module: str
    summary: str
    optional: bool = False


class RecordingPipelinePlan:
    """Ordered stage catalogue for the recording pipeline."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            ProcessingStep.DOWNLOADING,
            "voicehearth.pipelines.recording.normalize",
            "Fetch each page through a signed URL and convert it to canonical WAV.",
        ),
        PipelineStage(
            2,
            ProcessingStep.STITCHING,
            "voicehearth.pipelines.recording.stitch",
            "Concatenate the pages with a short silence between consecutive pages.",
        ),
        PipelineStage(
            3,
            ProcessingStep.POLISHING,
            "voicehearth.pipelines.recording.polish",
            "Remove low-frequency rumble and normalize loudness to -16 LUFS.",
        ),
        PipelineStage(
            4,
            ProcessingStep.MIXING_MUSIC,
            "voicehearth.pipelines.recording.music",
            "Mix the selected background track at low volume under the narration.",
            optional=True,
        ),
        PipelineStage(
            5,
            ProcessingStep.ENCODING,
            "voicehearth.pipelines.recording.encode",
            "Encode the final track to tagged 192 kbps MP3.",
        ),
        PipelineStage(
            6,
            ProcessingStep.UPLOADING,
            "voicehearth.pipelines.recording.publish",
            "Upload the MP3 to durable storage under the session's key.",
        ),
    ]

    @classmethod
    def describe(cls) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(cls._STAGES)

    @classmethod
    def plan_steps(cls, *, music_selected: bool) -> tuple[ProcessingStep, ...]:
        """Return the steps a run will enter, skipping music when none was chosen."""

        return tuple(
            stage.step
            for stage in cls._STAGES
            if music_selected or not stage.optional
        )


__all__ = ["PipelineStage", "RecordingPipelinePlan"]
