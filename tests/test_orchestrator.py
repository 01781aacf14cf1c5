"""End-to-end runs of the recording pipeline against in-memory collaborators."""

from __future__ import annotations

import asyncio

import pytest

from voicehearth.pipelines.recording import (
    DownloadError,
    NoPagesError,
    ProcessRecordingRequest,
    TranscodeError,
    UploadError,
)
from voicehearth.pipelines.recording.orchestrator import UNKNOWN_FAILURE_MESSAGE

from conftest import FakeEngine

NO_MUSIC_STEPS = ["downloading", "stitching", "polishing", "encoding", "uploading"]
MUSIC_STEPS = ["downloading", "stitching", "polishing", "mixing_music", "encoding", "uploading"]


def _request(**overrides) -> ProcessRecordingRequest:
    values = {
        "session_id": "s1",
        "story_title": "The Little Lighthouse",
        "purchase_id": "p1",
    }
    values.update(overrides)
    return ProcessRecordingRequest(**values)


def _encode_job(engine):
    return next(job for job in engine.jobs if job.label == "encode mp3")


def test_completes_without_music(pipeline, status_sink, artifact_sink, scratch_root):
    key = asyncio.run(pipeline.process_recording(_request()))

    assert key == "processed/s1.mp3"
    assert status_sink.steps == NO_MUSIC_STEPS
    assert status_sink.terminal == [("completed", "p1", "processed/s1.mp3")]
    data, content_type = artifact_sink.uploads["processed/s1.mp3"]
    assert data == b"audio:encode mp3"
    assert content_type == "audio/mpeg"
    assert not (scratch_root / "s1").exists()


def test_pages_are_stitched_in_order_with_silence_between(pipeline, engine, scratch_root):
    asyncio.run(pipeline.process_recording(_request()))

    workspace = scratch_root / "s1"
    expected = [
        workspace / "page-0.wav",
        workspace / "silence.wav",
        workspace / "page-1.wav",
        workspace / "silence.wav",
        workspace / "page-2.wav",
    ]
    assert engine.manifest == "\n".join(f"file '{path}'" for path in expected)


def test_each_page_is_signed_and_normalized(pipeline, page_source, fetcher, engine):
    asyncio.run(pipeline.process_recording(_request()))

    assert [ref for ref, _ in page_source.signed] == [
        "sessions/s1/page-0.webm",
        "sessions/s1/page-1.webm",
        "sessions/s1/page-2.webm",
    ]
    assert all(ttl == 300 for _, ttl in page_source.signed)
    assert len(fetcher.fetched) == 3
    assert engine.labels[:3] == [
        "normalize page-0.raw",
        "normalize page-1.raw",
        "normalize page-2.raw",
    ]


def test_encode_tags_title_album_and_reader(pipeline, engine):
    asyncio.run(pipeline.process_recording(_request(reader_name="Grandma Rose")))

    assert dict(_encode_job(engine).metadata) == {
        "title": "The Little Lighthouse",
        "album": "VoiceHearth",
        "artist": "Read by Grandma Rose",
    }


def test_music_is_mixed_under_the_voice(pipeline, status_sink, engine, fetcher):
    asyncio.run(
        pipeline.process_recording(_request(music_track="forest rain"))
    )

    assert status_sink.steps == MUSIC_STEPS
    assert "https://app.example.com/music/forest%20rain.mp3" in fetcher.fetched
    mix = next(job for job in engine.jobs if job.label == "mix music")
    graph = ";".join(mix.filter_complex)
    assert "atrim=duration=42" in graph
    assert "afade=t=out:st=37:d=5" in graph
    assert "volume=0.1[music]" in graph
    assert "amix=inputs=2:duration=first" in graph
    assert engine.probed[0].name == "polished.wav"
    assert _encode_job(engine).inputs[0].source.endswith("mixed.wav")


def test_unreachable_music_falls_back_to_polished_voice(
    pipeline, status_sink, engine, fetcher
):
    fetcher.missing.add("/music/")

    key = asyncio.run(pipeline.process_recording(_request(music_track="missing-song")))

    assert key == "processed/s1.mp3"
    assert status_sink.steps == MUSIC_STEPS
    assert status_sink.terminal == [("completed", "p1", "processed/s1.mp3")]
    assert "mix music" not in engine.labels
    assert _encode_job(engine).inputs[0].source.endswith("polished.wav")


def test_session_without_pages_fails_before_transcoding(
    pipeline, page_source, status_sink, engine, scratch_root
):
    page_source.pages = []

    with pytest.raises(NoPagesError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.steps == ["downloading"]
    assert status_sink.terminal == [
        ("failed", "p1", "No recording pages found for session")
    ]
    assert engine.jobs == []
    assert not (scratch_root / "s1").exists()


def test_download_failure_names_the_page(pipeline, status_sink, fetcher, artifact_sink):
    fetcher.missing.add("page-1")

    with pytest.raises(DownloadError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.terminal == [("failed", "p1", "Failed to download page 1")]
    assert artifact_sink.uploads == {}


def test_signing_failure_names_the_page(pipeline, page_source, status_sink):
    page_source.unsigned.add("sessions/s1/page-0.webm")

    with pytest.raises(DownloadError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.terminal == [("failed", "p1", "Failed to get signed URL for page 0")]


def test_transcode_failure_stops_at_the_failing_step(
    pipeline, status_sink, engine, artifact_sink, scratch_root
):
    engine.fail_on = "polish"

    with pytest.raises(TranscodeError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.steps == ["downloading", "stitching", "polishing"]
    [(kind, job_id, message)] = status_sink.terminal
    assert (kind, job_id) == ("failed", "p1")
    assert message.startswith("ffmpeg failed during polish")
    assert artifact_sink.uploads == {}
    assert not (scratch_root / "s1").exists()


def test_upload_failure_is_recorded(pipeline, status_sink, artifact_sink, scratch_root):
    artifact_sink.fail = True

    with pytest.raises(UploadError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.steps == NO_MUSIC_STEPS
    assert status_sink.terminal == [
        ("failed", "p1", "Failed to upload processed MP3: bucket unavailable")
    ]
    assert not (scratch_root / "s1").exists()


def test_unexpected_error_without_message_uses_fallback(pipeline, status_sink, monkeypatch):
    async def explode(self, job):
        raise RuntimeError()

    monkeypatch.setattr(FakeEngine, "submit", explode)

    with pytest.raises(RuntimeError):
        asyncio.run(pipeline.process_recording(_request()))

    assert status_sink.terminal == [("failed", "p1", UNKNOWN_FAILURE_MESSAGE)]


def test_reprocessing_a_session_overwrites_the_same_key(pipeline, status_sink, artifact_sink):
    first = asyncio.run(pipeline.process_recording(_request()))
    second = asyncio.run(pipeline.process_recording(_request()))

    assert first == second == "processed/s1.mp3"
    assert list(artifact_sink.uploads) == ["processed/s1.mp3"]
    assert status_sink.steps == NO_MUSIC_STEPS * 2


def test_missing_purchase_id_is_rejected_without_status_writes(pipeline, status_sink):
    with pytest.raises(ValueError):
        asyncio.run(pipeline.process_recording(_request(purchase_id=" ")))

    assert status_sink.events == []


def test_unsafe_session_id_fails_without_touching_the_filesystem(
    pipeline, status_sink, scratch_root
):
    sibling = scratch_root.parent / "keep-me"
    sibling.mkdir()

    with pytest.raises(ValueError):
        asyncio.run(pipeline.process_recording(_request(session_id="../keep-me")))

    assert sibling.exists()
    assert status_sink.steps == []
    assert status_sink.terminal == [("failed", "p1", "Invalid session_id '../keep-me'")]


def test_surrounding_whitespace_in_session_id_is_ignored(
    pipeline, status_sink, artifact_sink, scratch_root
):
    first = asyncio.run(pipeline.process_recording(_request(session_id="s1")))
    second = asyncio.run(pipeline.process_recording(_request(session_id=" s1 ")))

    assert first == second == "processed/s1.mp3"
    assert list(artifact_sink.uploads) == ["processed/s1.mp3"]
    assert not (scratch_root / "s1").exists()


def test_status_store_outage_does_not_mask_the_stage_error(
    pipeline, status_sink, engine, monkeypatch
):
    engine.fail_on = "polish"

    async def unavailable(self, job_id, message):
        raise ConnectionError("database unavailable")

    monkeypatch.setattr(type(status_sink), "set_failed", unavailable)

    with pytest.raises(TranscodeError, match="ffmpeg failed during polish"):
        asyncio.run(pipeline.process_recording(_request()))
