"""Recording pipeline package.

Modules follow the order in which a processing run executes (see ``flow``):

1. `normalize` – list pages, download, convert to canonical WAV.
2. `stitch` – interleave page clips with silence and concatenate.
3. `polish` – high-pass + loudness normalization.
4. `music` – optional background music mix with graceful fallback.
5. `encode` – tagged MP3 encode.
6. `publish` – upload under the deterministic session key.

`orchestrator` ties the stages together; `supervisor` runs it in the background
for the HTTP trigger.
"""

from .errors import (
    DownloadError,
    InvalidStepTransition,
    MusicFetchFailure,
    NoPagesError,
    RecordingPipelineError,
    TranscodeError,
    UploadError,
)
from .flow import PipelineStage, RecordingPipelinePlan
from .interfaces import (
    SIGNED_URL_TTL_SECONDS,
    ArtifactSink,
    ByteFetcher,
    PageSource,
    StatusSink,
    TranscodingEngine,
)
from .orchestrator import RecordingPipeline
from .publish import artifact_key
from .supervisor import (
    PipelineSupervisor,
    current_pipeline_supervisor,
    get_pipeline_supervisor,
)
from .transcoding import TranscodeInput, TranscodeJob
from .types import (
    ALLOWED_TRANSITIONS,
    JobProgress,
    ProcessRecordingRequest,
    ProcessingStatus,
    ProcessingStep,
    RecordingPage,
)
from .workspace import SessionLeases, Workspace

__all__ = [
    "ALLOWED_TRANSITIONS",
    "SIGNED_URL_TTL_SECONDS",
    "ArtifactSink",
    "ByteFetcher",
    "DownloadError",
    "InvalidStepTransition",
    "JobProgress",
    "MusicFetchFailure",
    "NoPagesError",
    "PageSource",
    "PipelineStage",
    "PipelineSupervisor",
    "ProcessRecordingRequest",
    "ProcessingStatus",
    "ProcessingStep",
    "RecordingPage",
    "RecordingPipeline",
    "RecordingPipelineError",
    "RecordingPipelinePlan",
    "SessionLeases",
    "StatusSink",
    "TranscodeError",
    "TranscodeInput",
    "TranscodeJob",
    "TranscodingEngine",
    "UploadError",
    "Workspace",
    "artifact_key",
    "current_pipeline_supervisor",
    "get_pipeline_supervisor",
]
