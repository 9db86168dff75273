"""Storage interface for channel_feed.

This module defines the Protocol for persistent storage operations.
"""

from typing import ClassVar, Protocol, runtime_checkable

from channel_feed.models.bot import BotConfigDTO, LinkedChatDTO, WebhookStatus
from channel_feed.models.feed import MediaGroupBufferEntryDTO, PostDTO, PostMediaDTO
from channel_feed.models.session import ImportSessionDTO

__all__ = [
    "StorageInterface",
]


@runtime_checkable
class StorageInterface(Protocol):
    """Contract for persistent storage operations.

    The store is the single synchronization point of the pipeline: the
    duplicate check before inserting a post and the empty check before
    flushing a media group both read it as the source of truth.
    """

    config_class: ClassVar[type | None] = None

    # Bot configuration
    async def get_bot(self, bot_id: str) -> BotConfigDTO | None:
        """Get a bot by ID.

        Args:
            bot_id: Bot ID from the webhook path

        Returns:
            BotConfigDTO if found, None otherwise
        """
        ...

    async def list_bots(self) -> list[BotConfigDTO]:
        """Get all configured bots."""
        ...

    async def update_webhook_status(
        self,
        bot_id: str,
        status: WebhookStatus,
        registered_at: int | None = None,
        error: str | None = None,
    ) -> None:
        """Record the outcome of a webhook registration.

        Args:
            bot_id: Bot ID
            status: New registration status
            registered_at: Registration time (epoch seconds), kept if None
            error: Platform error description, cleared if None
        """
        ...

    async def touch_bot_sync(self, bot_id: str, synced_at: int) -> None:
        """Set the bot's last_sync_at."""
        ...

    async def find_linked_chats(self, chat_id: int) -> list[LinkedChatDTO]:
        """Find active linked chats of any bot that are bound to a collection.

        Args:
            chat_id: Platform chat ID

        Returns:
            List of matching linked chats
        """
        ...

    async def touch_linked_chat_sync(self, linked_chat_id: str, synced_at: int) -> None:
        """Set a linked chat's last_sync_at."""
        ...

    # Platform accounts and collections
    async def find_platform_user_id(self, telegram_user_id: int) -> str | None:
        """Map a platform user to a known account.

        Returns:
            Account ID, or None if the platform user is not linked
        """
        ...

    async def get_collection_title(self, collection_id: str) -> str | None:
        """Get the display title of a collection, None if unknown."""
        ...

    # Import sessions
    async def get_active_session(self, telegram_user_id: int) -> ImportSessionDTO | None:
        """Get the active import session of a user, if any."""
        ...

    async def save_session(self, session: ImportSessionDTO) -> str:
        """Insert a new import session.

        Returns:
            Session ID
        """
        ...

    async def complete_active_sessions(self, telegram_user_id: int, completed_at: int) -> int:
        """Complete every active session of a user.

        Returns:
            Number of sessions completed
        """
        ...

    async def complete_session(self, session_id: str, completed_at: int) -> None:
        """Mark one session completed."""
        ...

    async def increment_session_counter(self, session_id: str) -> int:
        """Increment a session's message counter.

        Returns:
            The counter value after the increment
        """
        ...

    # Posts
    async def post_exists(self, collection_id: str, source_message_id: int) -> bool:
        """Check if a message was already ingested into a collection.

        Both posts and group media rows of the collection are considered.
        """
        ...

    async def save_post(self, post: PostDTO) -> str:
        """Insert a post.

        Returns:
            Post ID
        """
        ...

    async def save_post_media(self, media: PostMediaDTO) -> str:
        """Insert a group media row.

        Returns:
            PostMedia ID
        """
        ...

    async def get_posts_for_collection(self, collection_id: str) -> list[PostDTO]:
        """Get all posts of a collection, ordered by publication time."""
        ...

    async def get_media_for_post(self, post_id: str) -> list[PostMediaDTO]:
        """Get the media rows of a group post, ordered by order_index."""
        ...

    # Media group buffer
    async def append_buffer_entry(self, entry: MediaGroupBufferEntryDTO) -> str:
        """Append a media group member to the buffer.

        Returns:
            Buffer entry ID
        """
        ...

    async def buffer_entry_exists(
        self,
        media_group_id: str,
        collection_id: str,
        message_id: int,
    ) -> bool:
        """Check if a group member is already buffered."""
        ...

    async def get_buffer_entries(
        self,
        media_group_id: str,
        collection_id: str,
    ) -> list[MediaGroupBufferEntryDTO]:
        """Get buffered members of a group, ordered by message ID."""
        ...

    async def delete_buffer_entries_by_id(self, entry_ids: list[str]) -> int:
        """Delete the given buffer rows.

        Returns:
            Number of deleted rows
        """
        ...

    async def purge_buffer_entries(self, received_before: int) -> int:
        """Delete buffer rows that arrived before the given time.

        Returns:
            Number of deleted rows
        """
        ...
