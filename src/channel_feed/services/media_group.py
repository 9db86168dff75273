"""Media group aggregation service for channel_feed.

This module buffers the members of a media group, which arrive as separate
webhook events, and turns them into one post after a quiescence window.
"""

from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.messages import DOWNLOAD_FAILED
from channel_feed.models.feed import MediaGroupBufferEntryDTO, PostDTO
from channel_feed.services.file_storage import FileStorageService
from channel_feed.services.post_builder import PostBuilder
from channel_feed.services.scheduler import FlushScheduler
from channel_feed.utils.ids import now_epoch

__all__ = [
    "MediaGroupAggregator",
]

logger = get_logger(__name__)

GroupKey = tuple[str, str]


class MediaGroupAggregator:
    """Buffers media group members and flushes them into posts.

    The first arrival for a (media_group_id, collection_id) key schedules a
    single flush after ``delay_seconds``; later arrivals only append to the
    buffer. Flushing is idempotent: the buffer is re-read and checked for
    emptiness, a flush already running for the key is skipped, and the
    parent post is checked against existing posts before it is inserted.

    Example:
        aggregator = MediaGroupAggregator(storage, file_storage, FlushScheduler())
        await aggregator.add(entry, bot_token)
    """

    def __init__(
        self,
        storage: StorageInterface,
        file_storage: FileStorageService,
        scheduler: FlushScheduler,
        delay_seconds: float = 5.0,
        post_builder: PostBuilder | None = None,
    ) -> None:
        """Initialize aggregator with dependencies.

        Args:
            storage: Storage for buffer rows and posts
            file_storage: Retrieval pipeline for member media
            scheduler: Timer used to debounce flushes
            delay_seconds: Quiescence window measured from the first arrival
            post_builder: Builder for post rows
        """
        self._storage = storage
        self._file_storage = file_storage
        self._scheduler = scheduler
        self._delay_seconds = delay_seconds
        self._post_builder = post_builder or PostBuilder()
        self._flushing: set[GroupKey] = set()

    async def add(
        self,
        entry: MediaGroupBufferEntryDTO,
        bot_token: str,
        failure_message: str = DOWNLOAD_FAILED,
        suppress_duplicates: bool = True,
    ) -> bool:
        """Buffer a group member and schedule the group's flush.

        Args:
            entry: Buffer row for the member
            bot_token: Token used to retrieve the group's media on flush
            failure_message: Error recorded for members whose download fails
            suppress_duplicates: Skip members whose message ID already has a
                post in the collection (channel posts only)

        Returns:
            True if buffered, False if the member was already ingested or buffered
        """
        if suppress_duplicates and await self._storage.post_exists(
            entry.collection_id, entry.message_id
        ):
            logger.info(
                "group_member_already_ingested",
                media_group_id=entry.media_group_id,
                message_id=entry.message_id,
            )
            return False
        if await self._storage.buffer_entry_exists(
            entry.media_group_id, entry.collection_id, entry.message_id
        ):
            logger.info(
                "group_member_already_buffered",
                media_group_id=entry.media_group_id,
                message_id=entry.message_id,
            )
            return False

        await self._storage.append_buffer_entry(entry)

        scheduled = self._schedule_flush(
            entry.media_group_id,
            entry.collection_id,
            bot_token,
            failure_message,
            suppress_duplicates,
        )
        logger.debug(
            "group_member_buffered",
            media_group_id=entry.media_group_id,
            collection_id=entry.collection_id,
            message_id=entry.message_id,
            flush_scheduled=scheduled,
        )
        return True

    def _schedule_flush(
        self,
        media_group_id: str,
        collection_id: str,
        bot_token: str,
        failure_message: str,
        suppress_duplicates: bool,
    ) -> bool:
        return self._scheduler.schedule(
            (media_group_id, collection_id),
            self._delay_seconds,
            lambda: self.flush(
                media_group_id, collection_id, bot_token, failure_message, suppress_duplicates
            ),
        )

    async def flush(
        self,
        media_group_id: str,
        collection_id: str,
        bot_token: str,
        failure_message: str = DOWNLOAD_FAILED,
        suppress_duplicates: bool = True,
    ) -> PostDTO | None:
        """Turn the buffered members of a group into a post.

        A group with more than one member becomes a parent post with one
        media row per member. A lone member becomes a plain single post.
        Only the rows read at the start are consumed; members buffered while
        the flush runs get a flush of their own.

        Args:
            media_group_id: Platform media group ID
            collection_id: Target collection
            bot_token: Token used to retrieve member media
            failure_message: Error recorded for members whose download fails
            suppress_duplicates: Drop the group if its first message ID
                already has a post in the collection

        Returns:
            The created post, or None if nothing was created
        """
        key = (media_group_id, collection_id)
        if key in self._flushing:
            logger.debug("group_flush_in_progress", media_group_id=media_group_id)
            return None

        self._flushing.add(key)
        try:
            post = await self._flush(
                media_group_id, collection_id, bot_token, failure_message, suppress_duplicates
            )
        finally:
            self._flushing.discard(key)

        if await self._storage.get_buffer_entries(media_group_id, collection_id):
            scheduled = self._schedule_flush(
                media_group_id, collection_id, bot_token, failure_message, suppress_duplicates
            )
            logger.info(
                "group_late_members_pending",
                media_group_id=media_group_id,
                collection_id=collection_id,
                flush_scheduled=scheduled,
            )
        return post

    async def _flush(
        self,
        media_group_id: str,
        collection_id: str,
        bot_token: str,
        failure_message: str,
        suppress_duplicates: bool,
    ) -> PostDTO | None:
        entries = await self._storage.get_buffer_entries(media_group_id, collection_id)
        if not entries:
            return None

        entries = sorted(entries, key=lambda e: e.message_id)
        entry_ids = [e.id for e in entries]
        first = entries[0]

        if suppress_duplicates and await self._storage.post_exists(
            collection_id, first.message_id
        ):
            dropped = await self._storage.delete_buffer_entries_by_id(entry_ids)
            logger.info(
                "group_already_ingested",
                media_group_id=media_group_id,
                collection_id=collection_id,
                dropped=dropped,
            )
            return None

        if len(entries) == 1:
            retrieval = await self._file_storage.retrieve(
                first.media, bot_token, collection_id, failure_message
            )
            post = self._post_builder.build_single(
                collection_id,
                first.message_id,
                first.caption or "",
                first.media,
                retrieval,
                first.message_date,
            )
            await self._storage.save_post(post)
        else:
            post = self._post_builder.build_group_parent(entries)
            await self._storage.save_post(post)
            for order_index, entry in enumerate(entries):
                retrieval = await self._file_storage.retrieve(
                    entry.media, bot_token, collection_id, failure_message
                )
                item = self._post_builder.build_group_item(
                    post.id, entry, retrieval, order_index
                )
                await self._storage.save_post_media(item)

        await self._storage.delete_buffer_entries_by_id(entry_ids)
        logger.info(
            "group_flushed",
            post_id=post.id,
            media_group_id=media_group_id,
            collection_id=collection_id,
            media_count=len(entries),
        )
        return post

    async def purge_stale(self, ttl_seconds: int) -> int:
        """Delete buffer rows older than ``ttl_seconds``.

        Returns:
            Number of deleted rows
        """
        deleted = await self._storage.purge_buffer_entries(now_epoch() - ttl_seconds)
        if deleted:
            logger.info("stale_group_buffers_purged", deleted=deleted)
        return deleted
