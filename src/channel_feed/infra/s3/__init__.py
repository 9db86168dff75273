"""S3 object storage infrastructure for channel_feed."""

from channel_feed.infra.s3.client import S3ObjectStorage

__all__ = ["S3ObjectStorage"]
