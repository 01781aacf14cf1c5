"""Common response schemas."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
