"""Argument building for the individual recording stages."""

from __future__ import annotations

from pathlib import Path

import pytest

from voicehearth.pipelines.recording import MusicFetchFailure
from voicehearth.pipelines.recording.encode import build_metadata, encode_job
from voicehearth.pipelines.recording.music import (
    build_music_filter_graph,
    fade_out_start,
    mix_job,
    resolve_music_url,
)
from voicehearth.pipelines.recording.polish import polish_job
from voicehearth.pipelines.recording.publish import artifact_key
from voicehearth.pipelines.recording.stitch import (
    build_concat_manifest,
    render_concat_manifest,
    silence_job,
)
from voicehearth.pipelines.recording.transcoding import format_seconds


@pytest.mark.parametrize("count", [1, 2, 5])
def test_manifest_interleaves_silence(count):
    clips = [Path(f"/w/page-{index}.wav") for index in range(count)]
    silence = Path("/w/silence.wav")

    entries = build_concat_manifest(clips, silence)

    assert len(entries) == 2 * count - 1
    assert entries[::2] == clips
    assert all(entry == silence for entry in entries[1::2])


def test_manifest_of_no_clips_is_empty():
    assert build_concat_manifest([], Path("/w/silence.wav")) == []


def test_manifest_rendering_escapes_single_quotes():
    rendered = render_concat_manifest([Path("/w/it's.wav"), Path("/w/b.wav")])

    assert rendered == "file '/w/it'\\''s.wav'\nfile '/w/b.wav'"


def test_silence_is_three_quarters_of_a_second_of_mono():
    args = silence_job(Path("/w/silence.wav")).to_args()

    assert args[:5] == ["-y", "-f", "lavfi", "-i", "anullsrc=r=44100:cl=mono"]
    assert args[args.index("-t") + 1] == "0.75"


def test_polish_applies_highpass_then_loudnorm():
    args = polish_job(Path("/w/in.wav"), Path("/w/out.wav")).to_args()

    assert args[args.index("-af") + 1] == "highpass=f=80,loudnorm=I=-16:TP=-1.5:LRA=11"


@pytest.mark.parametrize(
    ("duration", "expected"),
    [(3.0, 0.0), (5.0, 0.0), (60.0, 55.0), (12.5, 7.5)],
)
def test_fade_out_starts_five_seconds_before_the_end(duration, expected):
    assert fade_out_start(duration) == expected


def test_music_graph_for_short_narration():
    music, mix = build_music_filter_graph(3.0)

    assert music == (
        "[1:a]aloop=loop=-1:size=2e+09,atrim=duration=3,"
        "afade=t=in:st=0:d=3,afade=t=out:st=0:d=5,volume=0.1[music]"
    )
    assert mix == "[0:a][music]amix=inputs=2:duration=first:dropout_transition=2[out]"


def test_mix_job_maps_the_mixed_output():
    job = mix_job(Path("/w/polished.wav"), Path("/w/music.mp3"), Path("/w/mixed.wav"), 90.0)
    args = job.to_args()

    assert args[1:5] == ["-i", "/w/polished.wav", "-i", "/w/music.mp3"]
    assert args[args.index("-map") + 1] == "[out]"


def test_music_url_is_quoted_under_the_base():
    assert (
        resolve_music_url("https://app.example.com/", "Rainy Day")
        == "https://app.example.com/music/Rainy%20Day.mp3"
    )


def test_music_url_requires_a_base():
    with pytest.raises(MusicFetchFailure):
        resolve_music_url(None, "calm")


def test_metadata_omits_artist_without_reader():
    assert build_metadata("Moon Story") == {"title": "Moon Story", "album": "VoiceHearth"}


def test_encode_job_is_192k_mp3():
    args = encode_job(Path("/w/polished.wav"), Path("/w/output.mp3"), "Moon Story").to_args()

    assert args[args.index("-b:a") + 1] == "192k"
    assert args[-3:] == ["-f", "mp3", "/w/output.mp3"]
    assert "title=Moon Story" in args
    assert "album=VoiceHearth" in args


def test_artifact_key_is_deterministic():
    assert artifact_key("abc") == artifact_key("abc") == "processed/abc.mp3"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(3.0, "3"), (0.75, "0.75"), (0.0, "0"), (41.2345678, "41.234568")],
)
def test_format_seconds(value, expected):
    assert format_seconds(value) == expected
