"""Processing trigger controller."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from voicehearth.controllers.dependencies import SupervisorDep, require_api_key
from voicehearth.pipelines.recording import ProcessRecordingRequest
from voicehearth.views import ProcessAcceptedResponse, ProcessRecordingPayload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["processing"], dependencies=[Depends(require_api_key)])

MISSING_FIELDS_MESSAGE = "sessionId, storyTitle, and purchaseId are required"


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


@router.post("/process", response_model=ProcessAcceptedResponse)
async def process_recording(
    payload: ProcessRecordingPayload,
    supervisor: SupervisorDep,
) -> ProcessAcceptedResponse:
    if not all(
        _present(value)
        for value in (payload.session_id, payload.story_title, payload.purchase_id)
    ):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=MISSING_FIELDS_MESSAGE,
        )

    request = ProcessRecordingRequest(
        session_id=payload.session_id.strip(),
        story_title=payload.story_title.strip(),
        purchase_id=payload.purchase_id.strip(),
        reader_name=payload.reader_name or None,
        music_track=payload.music_track or None,
    )
    supervisor.spawn(request)
    logger.info("Accepted processing request for session %s", request.session_id)
    return ProcessAcceptedResponse()
