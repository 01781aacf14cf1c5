"""Repository helpers for reading the recorded pages of a session."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select

from voicehearth.database import session_scope
from voicehearth.models.recording_page import RecordingPage as RecordingPageModel
from voicehearth.pipelines.recording.interfaces import SIGNED_URL_TTL_SECONDS, PageSource
from voicehearth.pipelines.recording.types import RecordingPage
from voicehearth.services.storage import RecordingStorage

logger = logging.getLogger(__name__)


class SqlPageSource(PageSource):
    """Read page rows from the database and sign their storage keys."""

    def __init__(self, storage: RecordingStorage) -> None:
        self._storage = storage

    async def list_pages(self, session_id: str) -> List[RecordingPage]:
        async with session_scope() as session:
            result = await session.execute(
                select(
                    RecordingPageModel.page_index,
                    RecordingPageModel.audio_url,
                    RecordingPageModel.duration_seconds,
                )
                .where(RecordingPageModel.session_id == session_id)
                .where(RecordingPageModel.audio_url.is_not(None))
                .order_by(RecordingPageModel.page_index.asc())
            )
            rows = result.all()

        logger.debug("Loaded %d page rows for session_id=%s", len(rows), session_id)
        return [
            RecordingPage(
                index=row.page_index,
                audio_ref=row.audio_url,
                stored_duration=row.duration_seconds,
            )
            for row in rows
        ]

    async def signed_download(
        self, audio_ref: str, ttl_seconds: int = SIGNED_URL_TTL_SECONDS
    ) -> str:
        return await self._storage.signed_download(audio_ref, ttl_seconds)


__all__ = ["SqlPageSource"]
