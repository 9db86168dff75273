"""Inbound webhook payload models for channel_feed.

These models validate the subset of the Telegram Bot API ``Update`` object
that the ingestion pipeline reads. Unknown fields are ignored so that new
platform fields never break delivery.
"""

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Animation",
    "Audio",
    "Document",
    "ForwardOrigin",
    "PhotoSize",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "TelegramUser",
    "Video",
    "Voice",
]


class _TelegramObject(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class TelegramChat(_TelegramObject):
    id: int
    type: str
    title: str | None = None
    username: str | None = None


class TelegramUser(_TelegramObject):
    id: int
    is_bot: bool = False
    first_name: str | None = None
    username: str | None = None


class PhotoSize(_TelegramObject):
    """One resolution variant of a photo (also used for thumbnails)."""

    file_id: str
    file_unique_id: str | None = None
    width: int | None = None
    height: int | None = None
    file_size: int | None = None


class Video(_TelegramObject):
    file_id: str
    file_unique_id: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    thumbnail: PhotoSize | None = None
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Document(_TelegramObject):
    file_id: str
    file_unique_id: str | None = None
    thumbnail: PhotoSize | None = None
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Audio(_TelegramObject):
    file_id: str
    file_unique_id: str | None = None
    duration: int | None = None
    performer: str | None = None
    title: str | None = None
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Animation(_TelegramObject):
    file_id: str
    file_unique_id: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    thumbnail: PhotoSize | None = None
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Voice(_TelegramObject):
    file_id: str
    file_unique_id: str | None = None
    duration: int | None = None
    mime_type: str | None = None
    file_size: int | None = None


class ForwardOrigin(_TelegramObject):
    """Origin of a forwarded message (Bot API 7.0+)."""

    type: str
    date: int
    chat: TelegramChat | None = None
    message_id: int | None = None
    sender_user: TelegramUser | None = None


class TelegramMessage(_TelegramObject):
    """A message or channel post.

    At most one of the media fields is expected to be populated; when several
    are, the extractor applies a fixed precedence.
    """

    message_id: int
    date: int = Field(description="Epoch seconds")
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None
    caption: str | None = None
    photo: list[PhotoSize] | None = None
    video: Video | None = None
    document: Document | None = None
    audio: Audio | None = None
    animation: Animation | None = None
    voice: Voice | None = None
    forward_date: int | None = None
    forward_origin: ForwardOrigin | None = None
    media_group_id: str | None = None

    @property
    def is_private(self) -> bool:
        """Check if the message was sent in a private chat with the bot."""
        return self.chat.type == "private"

    @property
    def is_forwarded(self) -> bool:
        """Check if the message carries forward markers."""
        return self.forward_date is not None or self.forward_origin is not None

    @property
    def forwarded_at(self) -> int:
        """Original publication time of a forwarded message.

        Falls back to the delivery date when no forward markers are present.
        """
        if self.forward_date is not None:
            return self.forward_date
        if self.forward_origin is not None:
            return self.forward_origin.date
        return self.date

    @property
    def text_content(self) -> str:
        """Text or caption of the message, empty if neither is set."""
        return self.text or self.caption or ""


class TelegramUpdate(_TelegramObject):
    """Webhook envelope."""

    update_id: int
    message: TelegramMessage | None = None
    channel_post: TelegramMessage | None = None

    @property
    def is_channel_post(self) -> bool:
        return self.channel_post is not None

    @property
    def effective_message(self) -> TelegramMessage | None:
        """The channel post if present, otherwise the message."""
        return self.channel_post or self.message
