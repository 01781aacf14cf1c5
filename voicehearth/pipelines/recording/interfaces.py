from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from .transcoding import TranscodeJob
from .types import ProcessingStep, RecordingPage

SIGNED_URL_TTL_SECONDS = 300


class PageSource(ABC):
    """Lookup contract for the ordered pages of a recording session"""

    @abstractmethod
    async def list_pages(self, session_id: str) -> List[RecordingPage]:
        """Return pages with uploaded audio, ascending by page index."""

    @abstractmethod
    async def signed_download(
        self, audio_ref: str, ttl_seconds: int = SIGNED_URL_TTL_SECONDS
    ) -> str:
        """Return a time-limited URL for the page audio; raise DownloadError otherwise."""


class StatusSink(ABC):
    """Persistence contract for job progress and outcome"""

    @abstractmethod
    async def set_step(self, job_id: str, step: ProcessingStep) -> None:
        ...

    @abstractmethod
    async def set_failed(self, job_id: str, message: str) -> None:
        ...

    @abstractmethod
    async def set_completed(self, job_id: str, artifact_ref: str) -> None:
        ...


class ArtifactSink(ABC):
    """Durable storage contract for the finished track"""

    @abstractmethod
    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        """Store ``data`` under ``key``, replacing any existing object."""


class TranscodingEngine(ABC):
    """Execution contract for filter-graph jobs"""

    @abstractmethod
    async def submit(self, job: TranscodeJob) -> None:
        """Run the job to completion; raise TranscodeError on failure."""

    @abstractmethod
    async def probe_duration(self, path: Path) -> float:
        """Return the media duration in seconds."""


class ByteFetcher(ABC):
    """Transport contract for downloading remote files"""

    @abstractmethod
    async def fetch(self, url: str) -> bytes:
        """Return the response body; raise DownloadError on any failure."""
