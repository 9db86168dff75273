"""Interface contracts for channel_feed.

This module exports all Protocol-based interfaces for dependency injection.
"""

from channel_feed.interfaces.object_storage import ObjectInfo, ObjectStorageInterface
from channel_feed.interfaces.platform import ChatPlatformInterface, WebhookResult
from channel_feed.interfaces.storage import StorageInterface

__all__ = [
    "ChatPlatformInterface",
    "ObjectInfo",
    "ObjectStorageInterface",
    "StorageInterface",
    "WebhookResult",
]
