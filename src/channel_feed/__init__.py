"""channel_feed - Telegram webhook ingestion into a durable content feed.

This package provides tools for:
- Classifying inbound messages and extracting media metadata
- Reassembling media groups that arrive as separate webhook events
- Retrieving media from the Bot API into S3-compatible object storage
- Import sessions for bulk-forwarding channel history into a collection
- Fanning channel posts out to every bound collection without duplicates

Example usage:
    from channel_feed import (
        ChannelFeed,
        MongoStorageRepository,
        S3ObjectStorage,
        TelegramBotClient,
    )

    # Simple usage - config loaded from .env automatically
    async with ChannelFeed(
        storage_class=MongoStorageRepository,
        object_storage_class=S3ObjectStorage,
        platform_class=TelegramBotClient,
    ) as feed:
        feed.dispatch(bot_id, payload)
"""

__version__ = "0.1.0"

# Implementations
from channel_feed.infra.mongo.repositories import MongoStorageRepository
from channel_feed.infra.s3.client import S3ObjectStorage
from channel_feed.infra.telegram.client import TelegramBotClient

# Interfaces
from channel_feed.interfaces.object_storage import ObjectStorageInterface
from channel_feed.interfaces.platform import ChatPlatformInterface
from channel_feed.interfaces.storage import StorageInterface

# Orchestrator
from channel_feed.orchestrator import ChannelFeed

__all__ = [  # noqa: RUF022
    # Orchestrator
    "ChannelFeed",
    # Implementations
    "MongoStorageRepository",
    "S3ObjectStorage",
    "TelegramBotClient",
    # Interfaces
    "ChatPlatformInterface",
    "ObjectStorageInterface",
    "StorageInterface",
]
