# This project was developed with assistance from AI tools.
"""S3-compatible object storage for actor documents (MinIO in dev).

The boto3 client is synchronous, so every call is pushed to the default
thread-pool executor. A single instance is created lazily from settings;
routes receive it through the ``get_storage_service`` dependency.
"""

import asyncio
import logging
import os
import uuid
from functools import partial

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from ..core.config import Settings, settings

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/webp",
}

CONTRACT_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class StorageService:
    """Thin async wrapper around a boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
    ):
        self._bucket = bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(signature_version="s3v4", s3={"addressing_style": "path"}),
        )
        self._bucket_checked = False

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError:
            logger.info("Creating S3 bucket: %s", self._bucket)
            self._client.create_bucket(Bucket=self._bucket)
        self._bucket_checked = True

    async def _run(self, func, /, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    async def upload_file(self, file_data: bytes, object_key: str, content_type: str) -> str:
        """Upload bytes and return the object key."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._ensure_bucket)
        await self._run(
            self._client.put_object,
            Bucket=self._bucket,
            Key=object_key,
            Body=file_data,
            ContentType=content_type,
        )
        logger.info("Stored %s (%d bytes)", object_key, len(file_data))
        return object_key

    async def get_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        """Presigned GET URL for reviewers."""
        return await self._run(
            self._client.generate_presigned_url,
            ClientMethod="get_object",
            Params={"Bucket": self._bucket, "Key": object_key},
            ExpiresIn=expires_in,
        )

    @staticmethod
    def build_object_key(policy_id: int, actor_path: str, actor_id: int, filename: str) -> str:
        """``policies/{policy}/{actor_path}-{actor}/{uuid}-{name}``.

        Path components are stripped from the client-supplied filename.
        """
        safe_name = os.path.basename(filename or "") or "document"
        return f"policies/{policy_id}/{actor_path}-{actor_id}/{uuid.uuid4().hex}-{safe_name}"


_service: StorageService | None = None


def init_storage_service(cfg: Settings) -> StorageService:
    global _service  # noqa: PLW0603
    _service = StorageService(
        endpoint=cfg.S3_ENDPOINT,
        access_key=cfg.S3_ACCESS_KEY,
        secret_key=cfg.S3_SECRET_KEY,
        bucket=cfg.S3_BUCKET,
        region=cfg.S3_REGION,
    )
    logger.info("StorageService initialised (bucket=%s)", cfg.S3_BUCKET)
    return _service


def get_storage_service() -> StorageService:
    """FastAPI dependency; builds the client on first use."""
    if _service is None:
        return init_storage_service(settings)
    return _service
