"""Media models for channel_feed.

These models describe the single media item a message carries, both in its
classified platform form and as the flat metadata record that is buffered
and persisted.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from channel_feed.models.telegram import (
    Animation,
    Audio,
    Document,
    PhotoSize,
    Video,
    Voice,
)

__all__ = [
    "MEDIA_GROUP_TYPE",
    "MediaAttachment",
    "MediaKind",
    "MediaMetadata",
]

# Aggregate media_type of a parent post built from a media group.
MEDIA_GROUP_TYPE = "media_group"


class MediaKind(StrEnum):
    """Media categories, declared in extraction precedence order."""

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    ANIMATION = "animation"
    VOICE = "voice"


class MediaAttachment(BaseModel, frozen=True):
    """Classified media item of a message.

    ``kind`` is the tag; ``payload`` holds the platform object matching it.
    For images the payload is the already selected photo variant.
    """

    kind: MediaKind
    payload: PhotoSize | Video | Document | Audio | Animation | Voice


class MediaMetadata(BaseModel, frozen=True):
    """Flat media record extracted from a message.

    All fields are optional; a message without media yields a record with
    every field unset and no error. An errored record never carries a file
    reference, so no retrieval is attempted for it.

    Attributes:
        media_type: Media category, None for text-only messages
        file_id: Platform file reference used for retrieval
        file_size: Declared size in bytes
        file_name: Original or synthetic file name
        mime_type: Declared MIME type
        width: Pixel width (image, video, animation)
        height: Pixel height (image, video, animation)
        duration: Duration in seconds (video, audio, animation, voice)
        thumbnail_file_id: Platform reference of the preview image
        has_error: Whether the item cannot be retrieved
        error_message: Operator-facing description of the error
    """

    media_type: MediaKind | None = None
    file_id: str | None = None
    file_size: int | None = None
    file_name: str | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    thumbnail_file_id: str | None = None
    has_error: bool = False
    error_message: str | None = Field(default=None)

    @property
    def is_retrievable(self) -> bool:
        """Check if the item should be downloaded."""
        return not self.has_error and self.file_id is not None
