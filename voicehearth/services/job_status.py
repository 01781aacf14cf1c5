"""Repository helpers for writing pipeline progress onto purchase rows."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import update

from voicehearth.database import session_scope
from voicehearth.models.purchase import Purchase
from voicehearth.pipelines.recording.interfaces import StatusSink
from voicehearth.pipelines.recording.types import ProcessingStatus, ProcessingStep

logger = logging.getLogger(__name__)


def step_values(step: ProcessingStep) -> dict[str, Any]:
    """Column values for entering ``step``.

    Entering the first step starts a new run, so terminal fields left by a
    previous run are cleared.
    """

    values: dict[str, Any] = {"processing_step": step.value}
    if step is ProcessingStep.DOWNLOADING:
        values.update(processing_status=None, error_message=None, final_audio_url=None)
    return values


def failed_values(message: str) -> dict[str, Any]:
    return {
        "processing_status": ProcessingStatus.FAILED.value,
        "error_message": message,
        "final_audio_url": None,
    }


def completed_values(artifact_ref: str) -> dict[str, Any]:
    return {
        "processing_status": ProcessingStatus.COMPLETED.value,
        "final_audio_url": artifact_ref,
        "error_message": None,
    }


class SqlStatusSink(StatusSink):
    """Persist step transitions and outcomes on the ``purchases`` table."""

    async def set_step(self, job_id: str, step: ProcessingStep) -> None:
        await self._apply(job_id, step_values(step))

    async def set_failed(self, job_id: str, message: str) -> None:
        await self._apply(job_id, failed_values(message))

    async def set_completed(self, job_id: str, artifact_ref: str) -> None:
        await self._apply(job_id, completed_values(artifact_ref))

    async def _apply(self, job_id: str, values: dict[str, Any]) -> None:
        async with session_scope() as session:
            result = await session.execute(
                update(Purchase).where(Purchase.id == job_id).values(**values)
            )
            await session.commit()

        if result.rowcount == 0:
            logger.warning("No purchase found for id=%s; status update dropped", job_id)


__all__ = ["SqlStatusSink", "completed_values", "failed_values", "step_values"]
