"""S3-compatible object storage for uploaded originals."""
from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from studymate_shared import Settings
from studymate_shared.errors import ProviderError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ObjectStore(Protocol):
    async def put(self, key: str, body: bytes, content_type: Optional[str]) -> None:
        ...

    async def get(self, key: str) -> bytes:
        ...

    async def delete(self, key: str) -> None:
        ...


def build_object_key(prefix: str, filename: Optional[str]) -> str:
    """``<prefix>/<epoch millis>_<sanitized filename>``."""

    safe_name = _UNSAFE_KEY_CHARS.sub("_", filename or "upload").strip("_") or "upload"
    return f"{prefix}/{int(time.time() * 1000)}_{safe_name}"


class S3ObjectStore:
    def __init__(self, client, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        client = boto3.client(
            "s3",
            endpoint_url=settings.object_store_endpoint,
            region_name=settings.object_store_region,
            aws_access_key_id=settings.object_store_access_key,
            aws_secret_access_key=settings.object_store_secret_key,
        )
        return cls(client, settings.object_store_bucket)

    async def put(self, key: str, body: bytes, content_type: Optional[str]) -> None:
        def _put() -> None:
            extra = {"ContentType": content_type} if content_type else {}
            self._client.put_object(Bucket=self._bucket, Key=key, Body=body, **extra)

        try:
            await asyncio.to_thread(_put)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("object upload failed", extra={"key": key, "error": str(exc)})
            raise ProviderError("Error uploading file to storage") from exc
        logger.info("object stored", extra={"key": key, "bytes": len(body)})

    async def get(self, key: str) -> bytes:
        def _get() -> bytes:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()

        try:
            return await asyncio.to_thread(_get)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("object download failed", extra={"key": key, "error": str(exc)})
            raise ProviderError("Error downloading file from storage") from exc

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("object delete failed", extra={"key": key, "error": str(exc)})
            raise ProviderError("Error deleting file from storage") from exc
        logger.info("object deleted", extra={"key": key})
