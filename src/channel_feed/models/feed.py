"""Feed models for channel_feed.

These models represent the persisted content feed: posts, the child media
rows of group posts, and the buffer rows of media groups awaiting a flush.
"""

from pydantic import BaseModel, Field

from channel_feed.models.media import MediaMetadata

__all__ = [
    "MediaGroupBufferEntryDTO",
    "PostDTO",
    "PostMediaDTO",
]


class PostDTO(BaseModel, frozen=True):
    """A unit of the content feed.

    Single-media and text posts carry their media fields directly; group
    posts have ``media_type="media_group"`` and their items in PostMedia rows.

    Attributes:
        id: Post ID
        collection_id: Target collection the post belongs to
        source_type: Origin of the post
        title: Post title (empty for imported posts)
        text_content: Message text or caption
        media_type: Media kind, "media_group", or None for text posts
        media_group_id: Platform media group ID for group posts
        media_count: Number of media items
        storage_path: Object storage key of the media
        thumbnail_storage_path: Object storage key of the thumbnail
        source_message_id: Platform message ID the post was created from
        has_error: Whether the media could not be stored
        error_message: Operator-facing error description
        published_at: Original publication time in epoch seconds
        created_at: Ingestion time in epoch seconds
    """

    id: str
    collection_id: str
    source_type: str = Field(default="telegram")
    title: str = Field(default="")
    text_content: str = Field(default="")
    media_type: str | None = None
    media_group_id: str | None = None
    media_count: int = Field(default=1)
    storage_path: str | None = None
    thumbnail_storage_path: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    source_message_id: int | None = None
    has_error: bool = False
    error_message: str | None = None
    published_at: int = Field(description="Epoch seconds")
    created_at: int = Field(description="Epoch seconds")
    schema_version: int = Field(default=1)


class PostMediaDTO(BaseModel, frozen=True):
    """One item of a group post, ordered by ``order_index``."""

    id: str
    post_id: str
    collection_id: str
    source_message_id: int
    media_type: str | None = None
    storage_path: str | None = None
    thumbnail_storage_path: str | None = None
    file_name: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    has_error: bool = False
    error_message: str | None = None
    order_index: int = Field(default=0)
    schema_version: int = Field(default=1)


class MediaGroupBufferEntryDTO(BaseModel, frozen=True):
    """A media group member waiting for its group to be flushed.

    Attributes:
        id: Buffer row ID
        media_group_id: Platform media group ID
        collection_id: Target collection
        message_id: Platform message ID of the member
        media: Metadata extracted on arrival
        caption: Member caption, if any
        message_date: Publication time in epoch seconds
        received_at: Arrival time in epoch seconds
    """

    id: str
    media_group_id: str
    collection_id: str
    message_id: int
    media: MediaMetadata = Field(default_factory=MediaMetadata)
    caption: str | None = None
    message_date: int = Field(description="Epoch seconds")
    received_at: int = Field(description="Epoch seconds")
    schema_version: int = Field(default=1)
