"""Recording pipeline orchestration.

``RecordingPipeline.process_recording`` turns a session's page recordings into
one published MP3. For each step in ``RecordingPipelinePlan`` it records the
step on the job, runs the matching stage, and moves the resulting artifact
forward. Any failure is written to the job record before it propagates, and
the session workspace is removed on every exit path.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from dataclasses import replace
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Mapping

from voicehearth.telemetry import observe_stage, record_pipeline_outcome

from .context import StageContext
from .encode import encode_track
from .flow import RecordingPipelinePlan
from .interfaces import (
    ArtifactSink,
    ByteFetcher,
    PageSource,
    StatusSink,
    TranscodingEngine,
)
from .music import mix_music
from .normalize import load_pages, normalize_pages
from .polish import polish_track
from .publish import publish_track
from .stitch import stitch_pages
from .types import (
    JobProgress,
    PipelineState,
    ProcessRecordingRequest,
    ProcessingStatus,
    ProcessingStep,
)
from .workspace import SessionLeases, Workspace

logger = logging.getLogger("voicehearth.pipeline")

UNKNOWN_FAILURE_MESSAGE = "Unknown processing error"

StageHandler = Callable[[StageContext, PipelineState], Awaitable[None]]


def _validate_request(request: ProcessRecordingRequest) -> None:
    if not (request.session_id or "").strip():
        raise ValueError("session_id is required")
    if not (request.story_title or "").strip():
        raise ValueError("story_title is required")


async def _download(ctx: StageContext, state: PipelineState) -> None:
    state.pages = await load_pages(ctx, state.request.session_id)
    state.clips = await normalize_pages(ctx, state.pages)


async def _stitch(ctx: StageContext, state: PipelineState) -> None:
    state.voice_track = await stitch_pages(ctx, state.clips)


async def _polish(ctx: StageContext, state: PipelineState) -> None:
    state.voice_track = await polish_track(ctx, state.voice_track)
    state.encode_input = state.voice_track


async def _mix(ctx: StageContext, state: PipelineState) -> None:
    request = state.request
    mixed = await mix_music(ctx, state.voice_track, request.music_track)
    if mixed is not None:
        state.encode_input = mixed


async def _encode(ctx: StageContext, state: PipelineState) -> None:
    request = state.request
    state.artifact_path = await encode_track(
        ctx, state.encode_input, request.story_title, request.reader_name
    )


async def _upload(ctx: StageContext, state: PipelineState) -> None:
    state.artifact_key = await publish_track(
        ctx, state.request.session_id, state.artifact_path
    )


_STAGE_HANDLERS: Mapping[ProcessingStep, StageHandler] = {
    ProcessingStep.DOWNLOADING: _download,
    ProcessingStep.STITCHING: _stitch,
    ProcessingStep.POLISHING: _polish,
    ProcessingStep.MIXING_MUSIC: _mix,
    ProcessingStep.ENCODING: _encode,
    ProcessingStep.UPLOADING: _upload,
}


class RecordingPipeline:
    """Drive the stage sequence for one request at a time per session."""

    def __init__(
        self,
        *,
        pages: PageSource,
        status: StatusSink,
        artifacts: ArtifactSink,
        engine: TranscodingEngine,
        fetcher: ByteFetcher,
        scratch_root: str | Path,
        music_base_url: str | None = None,
        leases: SessionLeases | None = None,
    ) -> None:
        self._pages = pages
        self._status = status
        self._artifacts = artifacts
        self._engine = engine
        self._fetcher = fetcher
        self._scratch_root = Path(scratch_root)
        self._music_base_url = music_base_url
        self._leases = leases or SessionLeases()

    async def process_recording(self, request: ProcessRecordingRequest) -> str:
        """Run every stage for ``request`` and return the stored artifact key."""

        if not (request.purchase_id or "").strip():
            raise ValueError("purchase_id is required")
        request = replace(request, session_id=(request.session_id or "").strip())

        async with self._leases.hold(request.session_id):
            progress = JobProgress()
            async with Workspace(self._scratch_root, request.session_id) as workspace:
                async with self._failure_boundary(request, progress):
                    _validate_request(request)
                    await workspace.prepare()
                    ctx = StageContext(
                        workspace=workspace,
                        engine=self._engine,
                        fetcher=self._fetcher,
                        pages=self._pages,
                        artifacts=self._artifacts,
                        music_base_url=self._music_base_url,
                    )
                    artifact_key = await self._run_stages(ctx, request, progress)

        logger.info(
            "Completed processing for session %s: %s", request.session_id, artifact_key
        )
        return artifact_key

    async def _run_stages(
        self,
        ctx: StageContext,
        request: ProcessRecordingRequest,
        progress: JobProgress,
    ) -> str:
        state = PipelineState(request=request)
        steps = RecordingPipelinePlan.plan_steps(music_selected=bool(request.music_track))

        for step in steps:
            progress.advance(step)
            await self._status.set_step(request.purchase_id, step)
            logger.info("Session %s entering %s", request.session_id, step.value)
            started = time.perf_counter()
            await _STAGE_HANDLERS[step](ctx, state)
            observe_stage(step.value, time.perf_counter() - started)

        await self._status.set_completed(request.purchase_id, state.artifact_key)
        progress.complete()
        record_pipeline_outcome(ProcessingStatus.COMPLETED.value)
        return state.artifact_key

    @asynccontextmanager
    async def _failure_boundary(
        self,
        request: ProcessRecordingRequest,
        progress: JobProgress,
    ) -> AsyncIterator[None]:
        try:
            yield
        except Exception as exc:
            message = str(exc) or UNKNOWN_FAILURE_MESSAGE
            failed_step = progress.step.value if progress.step else "<start>"
            logger.error(
                "Processing failed for session %s at %s: %s",
                request.session_id,
                failed_step,
                message,
            )
            progress.fail()
            record_pipeline_outcome(ProcessingStatus.FAILED.value)
            try:
                await self._status.set_failed(request.purchase_id, message)
            except Exception:
                logger.exception(
                    "Could not record failure for purchase %s", request.purchase_id
                )
            raise


__all__ = ["RecordingPipeline", "UNKNOWN_FAILURE_MESSAGE"]
