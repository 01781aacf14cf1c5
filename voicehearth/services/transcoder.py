"""ffmpeg-backed transcoding engine."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from fastapi.concurrency import run_in_threadpool

from voicehearth.pipelines.recording.errors import TranscodeError
from voicehearth.pipelines.recording.interfaces import TranscodingEngine
from voicehearth.pipelines.recording.transcoding import TranscodeJob

logger = logging.getLogger(__name__)

_STDERR_TAIL_CHARS = 800


def _stderr_tail(stderr: bytes | None) -> str:
    if not stderr:
        return "No stderr"
    text = stderr.decode("utf-8", errors="replace").strip()
    return text[-_STDERR_TAIL_CHARS:]


class FfmpegTranscoder(TranscodingEngine):
    """Run ``TranscodeJob`` instances through the ffmpeg/ffprobe binaries."""

    def __init__(self, *, ffmpeg_bin: str = "ffmpeg", ffprobe_bin: str = "ffprobe") -> None:
        self._ffmpeg_bin = ffmpeg_bin
        self._ffprobe_bin = ffprobe_bin

    def build_command(self, job: TranscodeJob) -> list[str]:
        return [self._ffmpeg_bin, "-hide_banner", "-nostdin", *job.to_args()]

    async def submit(self, job: TranscodeJob) -> None:
        await run_in_threadpool(self._submit_sync, job)

    def _submit_sync(self, job: TranscodeJob) -> None:
        command = self.build_command(job)
        logger.debug("Running ffmpeg (%s): %s", job.label, " ".join(command))
        try:
            subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as exc:
            raise TranscodeError(f"ffmpeg executable not found: {self._ffmpeg_bin}") from exc
        except subprocess.CalledProcessError as exc:
            error_msg = _stderr_tail(exc.stderr)
            logger.error("ffmpeg failed during %s. stderr: %s", job.label, error_msg)
            raise TranscodeError(f"ffmpeg failed during {job.label}: {error_msg}") from exc

    async def probe_duration(self, path: Path) -> float:
        return await run_in_threadpool(self._probe_duration_sync, path)

    def _probe_duration_sync(self, path: Path) -> float:
        command = [
            self._ffprobe_bin,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_entries",
            "format=duration",
            str(path),
        ]
        try:
            process = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as exc:
            raise TranscodeError(f"ffprobe executable not found: {self._ffprobe_bin}") from exc
        except subprocess.CalledProcessError as exc:
            raise TranscodeError(
                f"ffprobe failed for {Path(path).name}: {_stderr_tail(exc.stderr)}"
            ) from exc

        try:
            data = json.loads(process.stdout or b"{}")
            raw_duration = (data.get("format") or {}).get("duration")
            return float(raw_duration) if raw_duration else 0.0
        except (ValueError, TypeError, AttributeError) as exc:
            raise TranscodeError(f"ffprobe returned an unreadable duration: {exc}") from exc


__all__ = ["FfmpegTranscoder"]
