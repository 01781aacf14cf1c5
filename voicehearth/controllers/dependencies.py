"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

import hmac
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from voicehearth.config.settings import settings
from voicehearth.pipelines.recording import PipelineSupervisor, get_pipeline_supervisor

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
    )


async def require_api_key(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> None:
    """Reject requests whose bearer token does not match the shared API key."""

    expected = settings.security.api_key
    if expected is None or credentials is None:
        raise _unauthorized()

    if not hmac.compare_digest(
        credentials.credentials.encode("utf-8"),
        expected.get_secret_value().encode("utf-8"),
    ):
        raise _unauthorized()


SupervisorDep = Annotated[PipelineSupervisor, Depends(get_pipeline_supervisor)]


__all__ = ["SupervisorDep", "bearer_scheme", "require_api_key"]
