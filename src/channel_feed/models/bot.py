"""Bot configuration models for channel_feed.

These models are owned by the platform's configuration side; the ingestion
core reads them and only writes webhook status and sync timestamps.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

__all__ = [
    "BotConfigDTO",
    "LinkedChatDTO",
    "WebhookStatus",
]


class WebhookStatus(StrEnum):
    """Webhook registration state of a bot."""

    PENDING = "pending"
    REGISTERED = "registered"
    FAILED = "failed"


class BotConfigDTO(BaseModel, frozen=True):
    """A configured bot.

    Attributes:
        id: Bot ID, used in the webhook path
        token: Bot API token
        username: Bot username
        channel_id: Primary bound channel, compared as a string
        collection_id: Collection bound to the bot
        is_active: Whether the bot accepts updates
        webhook_status: Last webhook registration outcome
        webhook_registered_at: Time of the last successful registration
        webhook_error: Platform error of the last failed registration
        last_sync_at: Last time a primary channel post was ingested
    """

    id: str
    token: str | None = None
    username: str | None = None
    channel_id: str | None = None
    collection_id: str | None = None
    is_active: bool = True
    webhook_status: WebhookStatus = Field(default=WebhookStatus.PENDING)
    webhook_registered_at: int | None = None
    webhook_error: str | None = None
    last_sync_at: int | None = None
    schema_version: int = Field(default=1)

    def is_primary_channel(self, chat_id: int) -> bool:
        """Check if a chat is this bot's primary bound channel."""
        return self.channel_id is not None and self.channel_id == str(chat_id)


class LinkedChatDTO(BaseModel, frozen=True):
    """Fan-out binding between a bot and an external chat."""

    id: str
    bot_id: str
    chat_id: int
    chat_title: str = Field(default="")
    chat_type: str = Field(default="channel")
    collection_id: str | None = None
    is_active: bool = True
    last_sync_at: int | None = None
    schema_version: int = Field(default=1)
