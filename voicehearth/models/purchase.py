"""SQLAlchemy model for purchases, the job record updated by the pipeline."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from voicehearth.models.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(String(64), primary_key=True)
    processing_step = Column(String(32), nullable=True)
    processing_status = Column(String(16), nullable=True, index=True)
    error_message = Column(Text, nullable=True)
    final_audio_url = Column(String(1024), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )


__all__ = ["Purchase"]
