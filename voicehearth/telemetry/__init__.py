"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    MUSIC_FALLBACKS,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STAGE_DURATION,
    observe_request,
    observe_stage,
    record_music_fallback,
    record_pipeline_outcome,
)

__all__ = [
    "ERROR_COUNTER",
    "MUSIC_FALLBACKS",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STAGE_DURATION",
    "observe_request",
    "observe_stage",
    "record_music_fallback",
    "record_pipeline_outcome",
]
