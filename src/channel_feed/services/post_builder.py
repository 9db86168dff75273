"""Post builder service for channel_feed.

This module builds PostDTOs and PostMediaDTOs from extracted media metadata
and the outcome of its retrieval.
"""

from channel_feed.logging import get_logger
from channel_feed.models.feed import MediaGroupBufferEntryDTO, PostDTO, PostMediaDTO
from channel_feed.models.media import MEDIA_GROUP_TYPE, MediaMetadata
from channel_feed.services.file_storage import RetrievalResult
from channel_feed.utils.ids import generate_id, now_epoch

__all__ = [
    "PostBuilder",
]

logger = get_logger(__name__)


class PostBuilder:
    """Service for building feed rows.

    Media fields are copied from the extracted metadata; storage keys and
    error flags come from the retrieval result.

    Example:
        builder = PostBuilder()
        post = builder.build_single(collection_id, message_id, text, media,
                                    retrieval, published_at)
    """

    def build_single(
        self,
        collection_id: str,
        source_message_id: int,
        text_content: str,
        media: MediaMetadata,
        retrieval: RetrievalResult,
        published_at: int,
    ) -> PostDTO:
        """Build a text or single-media post.

        Args:
            collection_id: Target collection
            source_message_id: Platform message ID
            text_content: Message text or caption
            media: Extracted media metadata (empty for text posts)
            retrieval: Outcome of retrieving the media
            published_at: Publication time in epoch seconds

        Returns:
            PostDTO
        """
        return PostDTO(
            id=generate_id(),
            collection_id=collection_id,
            text_content=text_content,
            media_type=media.media_type,
            storage_path=retrieval.storage_path,
            thumbnail_storage_path=retrieval.thumbnail_storage_path,
            file_name=media.file_name,
            file_size=media.file_size,
            mime_type=media.mime_type,
            width=media.width,
            height=media.height,
            duration=media.duration,
            source_message_id=source_message_id,
            has_error=retrieval.has_error,
            error_message=retrieval.error_message,
            published_at=published_at,
            created_at=now_epoch(),
        )

    def build_group_parent(
        self,
        entries: list[MediaGroupBufferEntryDTO],
    ) -> PostDTO:
        """Build the parent post of a media group.

        Args:
            entries: Buffered members, ordered by message ID

        Returns:
            PostDTO with media_type "media_group"
        """
        first = entries[0]
        caption = next((e.caption for e in entries if e.caption), "")
        published_at = min(e.message_date for e in entries)

        post = PostDTO(
            id=generate_id(),
            collection_id=first.collection_id,
            text_content=caption,
            media_type=MEDIA_GROUP_TYPE,
            media_group_id=first.media_group_id,
            media_count=len(entries),
            source_message_id=first.message_id,
            published_at=published_at,
            created_at=now_epoch(),
        )
        logger.debug(
            "group_parent_built",
            media_group_id=first.media_group_id,
            media_count=len(entries),
        )
        return post

    def build_group_item(
        self,
        post_id: str,
        entry: MediaGroupBufferEntryDTO,
        retrieval: RetrievalResult,
        order_index: int,
    ) -> PostMediaDTO:
        """Build one media row of a group post."""
        media = entry.media
        return PostMediaDTO(
            id=generate_id(),
            post_id=post_id,
            collection_id=entry.collection_id,
            source_message_id=entry.message_id,
            media_type=media.media_type,
            storage_path=retrieval.storage_path,
            thumbnail_storage_path=retrieval.thumbnail_storage_path,
            file_name=media.file_name,
            file_size=media.file_size,
            mime_type=media.mime_type,
            width=media.width,
            height=media.height,
            duration=media.duration,
            has_error=retrieval.has_error,
            error_message=retrieval.error_message,
            order_index=order_index,
        )
