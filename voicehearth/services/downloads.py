"""HTTP download helper used for page audio and background music."""

from __future__ import annotations

import logging

import httpx

from voicehearth.pipelines.recording.errors import DownloadError
from voicehearth.pipelines.recording.interfaces import ByteFetcher

logger = logging.getLogger(__name__)


class HttpFetcher(ByteFetcher):
    """Fetch whole response bodies with a single attempt per URL."""

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, url: str) -> bytes:
        async with httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(url)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise DownloadError(
                    f"Download returned HTTP {exc.response.status_code}"
                ) from exc
            except httpx.RequestError as exc:
                logger.warning("Download request failed: %s", exc)
                raise DownloadError(f"Download request failed: {exc}") from exc
        return response.content


__all__ = ["HttpFetcher"]
