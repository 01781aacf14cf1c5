"""Shared fixtures and in-memory collaborators for the recording pipeline tests."""

from __future__ import annotations

import os
from pathlib import Path
import sys
from typing import Iterable

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

# Settings are read once at import time.
os.environ.setdefault("API_KEY", "test-api-key")
os.environ.setdefault("APP_URL", "https://app.example.com")

from voicehearth.pipelines.recording import (  # noqa: E402
    ArtifactSink,
    ByteFetcher,
    DownloadError,
    PageSource,
    RecordingPage,
    RecordingPipeline,
    StatusSink,
    TranscodeError,
    TranscodeJob,
    TranscodingEngine,
    UploadError,
)

TEST_API_KEY = os.environ["API_KEY"]
MUSIC_BASE_URL = "https://app.example.com"


class FakePageSource(PageSource):
    def __init__(self, pages: Iterable[RecordingPage] = (), unsigned: Iterable[str] = ()) -> None:
        self.pages = list(pages)
        self.unsigned = set(unsigned)
        self.signed: list[tuple[str, int]] = []

    async def list_pages(self, session_id: str) -> list[RecordingPage]:
        return list(self.pages)

    async def signed_download(self, audio_ref: str, ttl_seconds: int = 300) -> str:
        self.signed.append((audio_ref, ttl_seconds))
        if audio_ref in self.unsigned:
            raise DownloadError(f"cannot sign {audio_ref}")
        return f"https://storage.example.com/signed/{audio_ref}"


class FakeStatusSink(StatusSink):
    def __init__(self) -> None:
        self.events: list[tuple[str, str, str | None]] = []

    async def set_step(self, job_id: str, step) -> None:
        self.events.append(("step", job_id, step.value))

    async def set_failed(self, job_id: str, message: str) -> None:
        self.events.append(("failed", job_id, message))

    async def set_completed(self, job_id: str, artifact_ref: str) -> None:
        self.events.append(("completed", job_id, artifact_ref))

    @property
    def steps(self) -> list[str]:
        return [value for kind, _, value in self.events if kind == "step"]

    @property
    def terminal(self) -> list[tuple[str, str, str | None]]:
        return [event for event in self.events if event[0] in {"failed", "completed"}]


class FakeArtifactSink(ArtifactSink):
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: dict[str, tuple[bytes, str]] = {}

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        if self.fail:
            raise UploadError("Failed to upload processed MP3: bucket unavailable")
        self.uploads[key] = (data, content_type)


class FakeEngine(TranscodingEngine):
    """Writes a placeholder file for each job and remembers what it was asked to do."""

    def __init__(self, fail_on: str | None = None, duration: float = 42.0) -> None:
        self.fail_on = fail_on
        self.duration = duration
        self.jobs: list[TranscodeJob] = []
        self.manifest: str | None = None
        self.probed: list[Path] = []

    @property
    def labels(self) -> list[str]:
        return [job.label for job in self.jobs]

    async def submit(self, job: TranscodeJob) -> None:
        self.jobs.append(job)
        if self.fail_on and job.label.startswith(self.fail_on):
            raise TranscodeError(f"ffmpeg failed during {job.label}: boom")
        if job.label == "concatenate":
            self.manifest = Path(job.inputs[0].source).read_text(encoding="utf-8")
        Path(job.output).write_bytes(f"audio:{job.label}".encode("utf-8"))

    async def probe_duration(self, path: Path) -> float:
        self.probed.append(Path(path))
        return self.duration


class FakeFetcher(ByteFetcher):
    def __init__(self, missing: Iterable[str] = ()) -> None:
        self.missing = set(missing)
        self.fetched: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.fetched.append(url)
        if any(fragment in url for fragment in self.missing):
            raise DownloadError("Download returned HTTP 404")
        return b"bytes-from:" + url.encode("utf-8")


def make_pages(count: int) -> list[RecordingPage]:
    return [
        RecordingPage(index=index, audio_ref=f"sessions/s1/page-{index}.webm")
        for index in range(count)
    ]


@pytest.fixture
def page_source() -> FakePageSource:
    return FakePageSource(make_pages(3))


@pytest.fixture
def status_sink() -> FakeStatusSink:
    return FakeStatusSink()


@pytest.fixture
def artifact_sink() -> FakeArtifactSink:
    return FakeArtifactSink()


@pytest.fixture
def engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def pipeline(page_source, status_sink, artifact_sink, engine, fetcher, scratch_root):
    return RecordingPipeline(
        pages=page_source,
        status=status_sink,
        artifacts=artifact_sink,
        engine=engine,
        fetcher=fetcher,
        scratch_root=scratch_root,
        music_base_url=MUSIC_BASE_URL,
    )
