"""S3 storage helpers for page recordings and processed tracks."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from voicehearth.config.settings import settings
from voicehearth.pipelines.recording.errors import DownloadError, UploadError
from voicehearth.pipelines.recording.interfaces import (
    SIGNED_URL_TTL_SECONDS,
    ArtifactSink,
)
from voicehearth.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class RecordingStorage(ArtifactSink):
    """Read raw page uploads and write processed tracks in one bucket."""

    def __init__(self, *, bucket: str | None = None, client: Any | None = None) -> None:
        self._bucket = bucket or settings.s3.bucket_name
        self._client = client or create_boto3_client(
            "s3",
            region_name=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    async def signed_download(
        self, object_key: str, ttl_seconds: int = SIGNED_URL_TTL_SECONDS
    ) -> str:
        """Return a presigned GET URL valid for ``ttl_seconds``."""

        if not self._bucket:
            raise DownloadError("S3 bucket name is not configured.")
        try:
            return await run_in_threadpool(
                self._client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": object_key},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Presigning %s failed: %s", object_key, exc)
            raise DownloadError(f"Failed to sign download for {object_key}: {exc}") from exc

    async def upload(self, key: str, data: bytes, content_type: str) -> None:
        """Upload ``data`` under ``key``; S3 overwrites any existing object."""

        if not data:
            raise UploadError("Failed to upload processed MP3: payload was empty")
        if not self._bucket:
            raise UploadError("Failed to upload processed MP3: bucket is not configured")
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UploadError(f"Failed to upload processed MP3: {exc}") from exc
        logger.info("Uploaded %d bytes to s3://%s/%s", len(data), self._bucket, key)


__all__ = ["RecordingStorage"]
