"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .process import ProcessAcceptedResponse, ProcessRecordingPayload

__all__ = [
    "ErrorResponse",
    "ProcessAcceptedResponse",
    "ProcessRecordingPayload",
]
