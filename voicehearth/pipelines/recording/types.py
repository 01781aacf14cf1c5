"""Typed containers shared across the recording pipeline.

These live in their own module so the stage modules, the orchestrator and the
service adapters can import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

from .errors import InvalidStepTransition

MUSIC_VOLUME = 0.1


class ProcessingStep(str, Enum):
    """Ordered progress markers written to the job record."""

    DOWNLOADING = "downloading"
    STITCHING = "stitching"
    POLISHING = "polishing"
    MIXING_MUSIC = "mixing_music"
    ENCODING = "encoding"
    UPLOADING = "uploading"


class ProcessingStatus(str, Enum):
    """Terminal outcomes of a job."""

    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Mapping[ProcessingStep | None, frozenset[ProcessingStep]] = {
    None: frozenset({ProcessingStep.DOWNLOADING}),
    ProcessingStep.DOWNLOADING: frozenset({ProcessingStep.STITCHING}),
    ProcessingStep.STITCHING: frozenset({ProcessingStep.POLISHING}),
    ProcessingStep.POLISHING: frozenset(
        {ProcessingStep.MIXING_MUSIC, ProcessingStep.ENCODING}
    ),
    ProcessingStep.MIXING_MUSIC: frozenset({ProcessingStep.ENCODING}),
    ProcessingStep.ENCODING: frozenset({ProcessingStep.UPLOADING}),
    ProcessingStep.UPLOADING: frozenset(),
}


class JobProgress:
    """In-memory state machine for one pipeline run.

    The orchestrator advances this before touching the status sink so that an
    out-of-order transition is rejected instead of persisted.
    """

    def __init__(self) -> None:
        self.step: ProcessingStep | None = None
        self.status: ProcessingStatus | None = None
        self.history: list[ProcessingStep] = []

    @property
    def is_terminal(self) -> bool:
        return self.status is not None

    def advance(self, step: ProcessingStep) -> None:
        if self.status is not None:
            raise InvalidStepTransition(
                f"Cannot enter '{step.value}' after the job is {self.status.value}"
            )
        if step not in ALLOWED_TRANSITIONS[self.step]:
            current = self.step.value if self.step else "<start>"
            raise InvalidStepTransition(f"Cannot move from '{current}' to '{step.value}'")
        self.step = step
        self.history.append(step)

    def complete(self) -> None:
        if self.status is not None:
            raise InvalidStepTransition(f"Job is already {self.status.value}")
        if self.step is not ProcessingStep.UPLOADING:
            current = self.step.value if self.step else "<start>"
            raise InvalidStepTransition(f"Cannot complete a job at '{current}'")
        self.status = ProcessingStatus.COMPLETED

    def fail(self) -> None:
        if self.status is None:
            self.status = ProcessingStatus.FAILED


@dataclass(frozen=True)
class RecordingPage:
    """One narrated page with uploaded audio."""

    index: int
    audio_ref: str
    stored_duration: float | None = None


@dataclass(frozen=True)
class ProcessRecordingRequest:
    """Everything the orchestrator needs to produce one finished track."""

    session_id: str
    story_title: str
    purchase_id: str
    reader_name: str | None = None
    music_track: str | None = None


@dataclass
class PipelineState:
    """Artifacts produced so far by the current run."""

    request: ProcessRecordingRequest
    pages: list[RecordingPage] = field(default_factory=list)
    clips: list[Path] = field(default_factory=list)
    voice_track: Path | None = None
    encode_input: Path | None = None
    artifact_path: Path | None = None
    artifact_key: str | None = None


__all__ = [
    "ALLOWED_TRANSITIONS",
    "MUSIC_VOLUME",
    "JobProgress",
    "PipelineState",
    "ProcessRecordingRequest",
    "ProcessingStatus",
    "ProcessingStep",
    "RecordingPage",
]
