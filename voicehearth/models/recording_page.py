"""SQLAlchemy model for recorded story pages."""

from __future__ import annotations

from sqlalchemy import Column, Float, Integer, String, UniqueConstraint

from voicehearth.models.base import Base


class RecordingPage(Base):
    __tablename__ = "recording_pages"
    __table_args__ = (
        UniqueConstraint("session_id", "page_index", name="uq_recording_pages_session_page"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(64), nullable=False, index=True)
    page_index = Column(Integer, nullable=False)
    audio_url = Column(String(1024), nullable=True)
    duration_seconds = Column(Float, nullable=True)


__all__ = ["RecordingPage"]
