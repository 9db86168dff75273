"""Message ingestion service for channel_feed.

This module turns one inbound message into feed rows for one collection,
shared by channel posts and forwarded import messages.
"""

from enum import StrEnum

from channel_feed.config import TELEGRAM_MAX_DOWNLOAD_BYTES
from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.messages import DOWNLOAD_FAILED
from channel_feed.models.feed import MediaGroupBufferEntryDTO
from channel_feed.models.telegram import TelegramMessage
from channel_feed.services.file_storage import FileStorageService
from channel_feed.services.media_extraction import extract_media
from channel_feed.services.media_group import MediaGroupAggregator
from channel_feed.services.post_builder import PostBuilder
from channel_feed.utils.ids import generate_id, now_epoch

__all__ = [
    "IngestOutcome",
    "IngestionService",
]

logger = get_logger(__name__)


class IngestOutcome(StrEnum):
    """Result of ingesting one message into one collection."""

    CREATED = "created"
    """A post was created"""

    BUFFERED = "buffered"
    """The message joined a media group buffer"""

    DUPLICATE = "duplicate"
    """The message was already ingested into the collection"""

    @property
    def accepted(self) -> bool:
        return self is not IngestOutcome.DUPLICATE


class IngestionService:
    """Ingests a message into a collection.

    Group members are handed to the media group aggregator; other messages
    become a single post immediately. A message ID already present in the
    collection is never ingested twice when the message comes from that
    collection's channel.

    Example:
        service = IngestionService(storage, file_storage, aggregator)
        outcome = await service.ingest(message, token, collection_id, message.date)
    """

    def __init__(
        self,
        storage: StorageInterface,
        file_storage: FileStorageService,
        aggregator: MediaGroupAggregator,
        max_download_bytes: int = TELEGRAM_MAX_DOWNLOAD_BYTES,
        post_builder: PostBuilder | None = None,
    ) -> None:
        """Initialize service with dependencies.

        Args:
            storage: Storage for posts
            file_storage: Retrieval pipeline for media
            aggregator: Media group aggregator
            max_download_bytes: Size limit for video and document retrieval
            post_builder: Builder for post rows
        """
        self._storage = storage
        self._file_storage = file_storage
        self._aggregator = aggregator
        self._max_download_bytes = max_download_bytes
        self._post_builder = post_builder or PostBuilder()

    async def ingest(
        self,
        message: TelegramMessage,
        bot_token: str,
        collection_id: str,
        published_at: int,
        failure_message: str = DOWNLOAD_FAILED,
        suppress_duplicates: bool = True,
    ) -> IngestOutcome:
        """Ingest a message into a collection.

        Args:
            message: Inbound message
            bot_token: Token of the receiving bot, used for retrieval
            collection_id: Target collection
            published_at: Publication time recorded on the post
            failure_message: Error recorded when the media download fails
            suppress_duplicates: Skip the message if its ID already has a post
                in the collection. Message IDs are only comparable within one
                chat, so forwarded input turns this off.

        Returns:
            IngestOutcome
        """
        media = extract_media(message, self._max_download_bytes)

        if message.media_group_id:
            entry = MediaGroupBufferEntryDTO(
                id=generate_id(),
                media_group_id=message.media_group_id,
                collection_id=collection_id,
                message_id=message.message_id,
                media=media,
                caption=message.caption,
                message_date=published_at,
                received_at=now_epoch(),
            )
            buffered = await self._aggregator.add(
                entry, bot_token, failure_message, suppress_duplicates
            )
            return IngestOutcome.BUFFERED if buffered else IngestOutcome.DUPLICATE

        if suppress_duplicates and await self._storage.post_exists(
            collection_id, message.message_id
        ):
            logger.info(
                "message_already_ingested",
                collection_id=collection_id,
                message_id=message.message_id,
            )
            return IngestOutcome.DUPLICATE

        retrieval = await self._file_storage.retrieve(
            media, bot_token, collection_id, failure_message
        )
        post = self._post_builder.build_single(
            collection_id,
            message.message_id,
            message.text_content,
            media,
            retrieval,
            published_at,
        )
        await self._storage.save_post(post)

        logger.info(
            "post_created",
            post_id=post.id,
            collection_id=collection_id,
            message_id=message.message_id,
            media_type=post.media_type,
            has_error=post.has_error,
        )
        return IngestOutcome.CREATED
