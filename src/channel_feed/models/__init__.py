"""Public DTO models for channel_feed.

This module exports all public data transfer objects.
"""

from channel_feed.models.bot import BotConfigDTO, LinkedChatDTO, WebhookStatus
from channel_feed.models.feed import MediaGroupBufferEntryDTO, PostDTO, PostMediaDTO
from channel_feed.models.media import (
    MEDIA_GROUP_TYPE,
    MediaAttachment,
    MediaKind,
    MediaMetadata,
)
from channel_feed.models.session import ImportSessionDTO, SessionState
from channel_feed.models.telegram import TelegramMessage, TelegramUpdate

__all__ = [
    "MEDIA_GROUP_TYPE",
    "BotConfigDTO",
    "ImportSessionDTO",
    "LinkedChatDTO",
    "MediaAttachment",
    "MediaGroupBufferEntryDTO",
    "MediaKind",
    "MediaMetadata",
    "PostDTO",
    "PostMediaDTO",
    "SessionState",
    "TelegramMessage",
    "TelegramUpdate",
    "WebhookStatus",
]
