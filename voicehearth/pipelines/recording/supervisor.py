"""Detached execution of recording pipelines behind the HTTP trigger.

The trigger acknowledges the request before processing starts, so every run
is spawned as an asyncio task owned by ``PipelineSupervisor``. The supervisor
keeps a strong reference to each task until it finishes and logs its outcome;
failures have already been written to the job record by the orchestrator.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .orchestrator import RecordingPipeline
from .types import ProcessRecordingRequest

logger = logging.getLogger("voicehearth.pipeline")


class PipelineSupervisor:
    """Spawn and track background pipeline runs."""

    def __init__(self, pipeline: RecordingPipeline) -> None:
        self._pipeline = pipeline
        self._tasks: set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def spawn(self, request: ProcessRecordingRequest) -> asyncio.Task:
        """Start processing ``request`` without waiting for it to finish."""

        task = asyncio.create_task(
            self._run_supervised(request),
            name=f"process-recording-{request.session_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info(
            "Queued processing for session %s (purchase %s)",
            request.session_id,
            request.purchase_id,
        )
        return task

    async def _run_supervised(self, request: ProcessRecordingRequest) -> Optional[str]:
        try:
            return await self._pipeline.process_recording(request)
        except asyncio.CancelledError:
            logger.warning("Processing cancelled for session %s", request.session_id)
            raise
        except Exception:
            logger.exception("Processing failed for session %s", request.session_id)
            return None

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight runs, giving up after ``timeout`` seconds."""

        pending = set(self._tasks)
        if not pending:
            return
        logger.info("Waiting for %d in-flight pipeline run(s)", len(pending))
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning(
                "%d pipeline run(s) still running after shutdown grace period",
                len(still_running),
            )


_DEFAULT_SUPERVISOR: PipelineSupervisor | None = None


def build_recording_pipeline() -> RecordingPipeline:
    """Wire the pipeline to the production adapters from settings."""

    from voicehearth.config.settings import settings
    from voicehearth.services import (
        FfmpegTranscoder,
        HttpFetcher,
        RecordingStorage,
        SqlPageSource,
        SqlStatusSink,
    )

    storage = RecordingStorage()
    return RecordingPipeline(
        pages=SqlPageSource(storage),
        status=SqlStatusSink(),
        artifacts=storage,
        engine=FfmpegTranscoder(
            ffmpeg_bin=settings.pipeline.ffmpeg_bin,
            ffprobe_bin=settings.pipeline.ffprobe_bin,
        ),
        fetcher=HttpFetcher(timeout=settings.pipeline.download_timeout_seconds),
        scratch_root=settings.pipeline.scratch_root,
        music_base_url=settings.pipeline.music_base_url,
    )


def get_pipeline_supervisor() -> PipelineSupervisor:
    """Return the process-wide supervisor, creating it on first use."""

    global _DEFAULT_SUPERVISOR
    if _DEFAULT_SUPERVISOR is None:
        _DEFAULT_SUPERVISOR = PipelineSupervisor(build_recording_pipeline())
    return _DEFAULT_SUPERVISOR


def current_pipeline_supervisor() -> PipelineSupervisor | None:
    """Return the supervisor if one has been created, without building it."""

    return _DEFAULT_SUPERVISOR


__all__ = [
    "PipelineSupervisor",
    "build_recording_pipeline",
    "current_pipeline_supervisor",
    "get_pipeline_supervisor",
]
