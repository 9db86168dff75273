"""S3 object storage for channel_feed.

This module provides an ObjectStorageInterface implementation backed by an
S3-compatible bucket. boto3 is synchronous, so calls run in a worker thread.
"""

import asyncio
from typing import Any, Self

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from channel_feed.config import S3Settings
from channel_feed.interfaces.object_storage import ObjectInfo, ObjectStorageInterface
from channel_feed.logging import get_logger

__all__ = [
    "S3ObjectStorage",
]

logger = get_logger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class S3ObjectStorage(ObjectStorageInterface):
    """S3 implementation of ObjectStorageInterface.

    Example:
        storage = await S3ObjectStorage.from_config(S3Settings())
        key = await storage.put("c1/telegram/1_abc.mp4", data, "video/mp4")
    """

    config_class = S3Settings

    def __init__(self, client: Any, bucket: str) -> None:
        """Initialize storage with a boto3 S3 client.

        Args:
            client: boto3 S3 client
            bucket: Bucket name
        """
        self._client = client
        self._bucket = bucket

    @classmethod
    async def from_config(cls, config: S3Settings) -> Self:
        """Factory method for ChannelFeed instantiation.

        Args:
            config: S3 settings

        Returns:
            S3ObjectStorage instance
        """
        client = boto3.client(
            "s3",
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key,
            aws_secret_access_key=(
                config.secret_key.get_secret_value() if config.secret_key else None
            ),
            region_name=config.region,
            config=Config(
                signature_version="s3v4",
                s3={"addressing_style": config.addressing_style},
            ),
        )
        logger.info(
            "s3_storage_initialized",
            bucket=config.bucket,
            endpoint=config.endpoint_url,
            addressing_style=config.addressing_style,
        )
        return cls(client, config.bucket)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict."""
        return await cls.from_config(S3Settings(**config))

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await asyncio.to_thread(self._client.close)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store an object."""
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("s3_put_failed", key=key, error=str(e))
            raise
        logger.debug("s3_put", key=key, size=len(data), content_type=content_type)
        return key

    async def get(self, key: str) -> bytes | None:
        """Read an object, None if it does not exist."""
        try:
            response = await asyncio.to_thread(
                self._client.get_object, Bucket=self._bucket, Key=key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return None
            raise
        return await asyncio.to_thread(response["Body"].read)

    async def head(self, key: str) -> ObjectInfo | None:
        """Read object metadata, None if it does not exist."""
        try:
            response = await asyncio.to_thread(
                self._client.head_object, Bucket=self._bucket, Key=key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES:
                return None
            raise
        return ObjectInfo(
            size=response.get("ContentLength", 0),
            content_type=response.get("ContentType", "application/octet-stream"),
        )
