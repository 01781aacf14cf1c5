"""Service layer adapters for external integrations."""

from .downloads import HttpFetcher
from .job_status import SqlStatusSink
from .page_repository import SqlPageSource
from .storage import RecordingStorage
from .transcoder import FfmpegTranscoder

__all__ = [
    "FfmpegTranscoder",
    "HttpFetcher",
    "RecordingStorage",
    "SqlPageSource",
    "SqlStatusSink",
]
