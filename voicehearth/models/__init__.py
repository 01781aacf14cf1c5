"""SQLAlchemy models mirroring the tables the pipeline reads and updates."""

from .base import Base
from .purchase import Purchase  # noqa: F401
from .recording_page import RecordingPage  # noqa: F401

__all__ = [
    "Base",
    "Purchase",
    "RecordingPage",
]
