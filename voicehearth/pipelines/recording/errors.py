"""Error taxonomy for the recording pipeline."""

from __future__ import annotations


class RecordingPipelineError(RuntimeError):
    """Base class for failures raised while processing a recording."""


class NoPagesError(RecordingPipelineError):
    """Raised when a session has no pages with uploaded audio."""


class DownloadError(RecordingPipelineError):
    """Raised when a page's signed URL or bytes cannot be obtained."""


class TranscodeError(RecordingPipelineError):
    """Raised when the transcoding engine reports a failed job or probe."""


class UploadError(RecordingPipelineError):
    """Raised when the finished artifact cannot be stored."""


class MusicFetchFailure(RecordingPipelineError):
    """Raised inside the music stage when the selected track is unreachable.

    Never escapes the stage: the pipeline falls back to the unmixed voice track.
    """


class InvalidStepTransition(ValueError):
    """Raised when a job would move backwards or past a terminal status."""


__all__ = [
    "RecordingPipelineError",
    "NoPagesError",
    "DownloadError",
    "TranscodeError",
    "UploadError",
    "MusicFetchFailure",
    "InvalidStepTransition",
]
