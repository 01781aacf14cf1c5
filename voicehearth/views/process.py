"""Schemas for the processing trigger."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessRecordingPayload(BaseModel):
    """Body of ``POST /process``.

    Required fields are optional here so the controller can answer with the
    single combined 400 message when any of them is missing. Clients may
    still send ``musicVolume``; it is ignored because music is always mixed
    at a fixed level.
    """

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    story_title: Optional[str] = Field(default=None, alias="storyTitle")
    purchase_id: Optional[str] = Field(default=None, alias="purchaseId")
    reader_name: Optional[str] = Field(default=None, alias="readerName")
    music_track: Optional[str] = Field(default=None, alias="musicTrack")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator(
        "session_id",
        "story_title",
        "purchase_id",
        "reader_name",
        "music_track",
        mode="before",
    )
    @classmethod
    def scalar_to_text(cls, value: Any) -> Optional[str]:
        # Numeric ids are used as text; anything non-scalar counts as missing.
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        return None


class ProcessAcceptedResponse(BaseModel):
    success: bool = True
    message: str = "Processing started"
