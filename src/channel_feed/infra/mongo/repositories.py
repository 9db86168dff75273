"""MongoDB repositories for channel_feed.

This module provides the repository implementation for MongoDB storage.
"""

from typing import Any, Self

from channel_feed.config import MongoSettings
from channel_feed.infra.mongo.client import MongoClient
from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.models.bot import BotConfigDTO, LinkedChatDTO, WebhookStatus
from channel_feed.models.feed import MediaGroupBufferEntryDTO, PostDTO, PostMediaDTO
from channel_feed.models.session import ImportSessionDTO

__all__ = [
    "MongoStorageRepository",
]

logger = get_logger(__name__)


class MongoStorageRepository(StorageInterface):
    """MongoDB implementation of StorageInterface.

    Provides operations for bot configuration, import sessions,
    the media group buffer, posts and post media.
    """

    config_class = MongoSettings

    def __init__(self, client: MongoClient) -> None:
        """Initialize repository with MongoDB client.

        Args:
            client: Connected MongoClient instance
        """
        self._client = client
        self._owns_client = False

    @classmethod
    async def from_config(cls, config: MongoSettings) -> Self:
        """Factory method for ChannelFeed instantiation.

        Creates a MongoClient, connects, creates indexes, and returns repository.

        Args:
            config: MongoDB settings

        Returns:
            Connected MongoStorageRepository instance
        """
        client = MongoClient(config)
        await client.connect()
        await client.create_indexes()

        instance = cls(client)
        instance._owns_client = True
        return instance

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with MongoDB settings

        Returns:
            Connected MongoStorageRepository instance
        """
        settings = MongoSettings(**config)
        return await cls.from_config(settings)

    async def close(self) -> None:
        """Close owned resources."""
        if self._owns_client and self._client:
            await self._client.disconnect()

    # Bot configuration
    async def get_bot(self, bot_id: str) -> BotConfigDTO | None:
        """Get a bot by ID."""
        doc = await self._client.bots.find_one({"id": bot_id})
        return self._doc_to_bot(doc) if doc else None

    async def list_bots(self) -> list[BotConfigDTO]:
        """Get all configured bots."""
        cursor = self._client.bots.find({})
        return [self._doc_to_bot(doc) async for doc in cursor]

    async def update_webhook_status(
        self,
        bot_id: str,
        status: WebhookStatus,
        registered_at: int | None = None,
        error: str | None = None,
    ) -> None:
        """Record the outcome of a webhook registration."""
        fields: dict[str, Any] = {"webhook_status": status.value, "webhook_error": error}
        if registered_at is not None:
            fields["webhook_registered_at"] = registered_at
        await self._client.bots.update_one({"id": bot_id}, {"$set": fields})

    async def touch_bot_sync(self, bot_id: str, synced_at: int) -> None:
        """Set the bot's last_sync_at."""
        await self._client.bots.update_one({"id": bot_id}, {"$set": {"last_sync_at": synced_at}})

    async def find_linked_chats(self, chat_id: int) -> list[LinkedChatDTO]:
        """Find active linked chats of any bot that are bound to a collection."""
        cursor = self._client.linked_chats.find(
            {
                "chat_id": chat_id,
                "is_active": True,
                "collection_id": {"$ne": None},
            }
        )
        return [self._doc_to_linked_chat(doc) async for doc in cursor]

    async def touch_linked_chat_sync(self, linked_chat_id: str, synced_at: int) -> None:
        """Set a linked chat's last_sync_at."""
        await self._client.linked_chats.update_one(
            {"id": linked_chat_id},
            {"$set": {"last_sync_at": synced_at}},
        )

    # Platform accounts and collections
    async def find_platform_user_id(self, telegram_user_id: int) -> str | None:
        """Map a platform user to a known account."""
        doc = await self._client.users.find_one({"telegram_user_id": telegram_user_id})
        return doc["id"] if doc else None

    async def get_collection_title(self, collection_id: str) -> str | None:
        """Get the display title of a collection."""
        doc = await self._client.collections.find_one({"id": collection_id})
        return doc.get("title") if doc else None

    # Import sessions
    async def get_active_session(self, telegram_user_id: int) -> ImportSessionDTO | None:
        """Get the active import session of a user."""
        doc = await self._client.import_sessions.find_one(
            {"telegram_user_id": telegram_user_id, "is_active": True}
        )
        return self._doc_to_session(doc) if doc else None

    async def save_session(self, session: ImportSessionDTO) -> str:
        """Insert a new import session."""
        await self._client.import_sessions.insert_one(self._model_to_doc(session))
        return session.id

    async def complete_active_sessions(self, telegram_user_id: int, completed_at: int) -> int:
        """Complete every active session of a user."""
        result = await self._client.import_sessions.update_many(
            {"telegram_user_id": telegram_user_id, "is_active": True},
            {"$set": {"is_active": False, "completed_at": completed_at}},
        )
        return result.modified_count

    async def complete_session(self, session_id: str, completed_at: int) -> None:
        """Mark one session completed."""
        await self._client.import_sessions.update_one(
            {"id": session_id},
            {"$set": {"is_active": False, "completed_at": completed_at}},
        )

    async def increment_session_counter(self, session_id: str) -> int:
        """Increment a session's message counter."""
        await self._client.import_sessions.update_one(
            {"id": session_id},
            {"$inc": {"message_count": 1}},
        )
        doc = await self._client.import_sessions.find_one({"id": session_id})
        return doc["message_count"] if doc else 0

    # Posts
    async def post_exists(self, collection_id: str, source_message_id: int) -> bool:
        """Check if a message was already ingested into a collection."""
        filter_ = {"collection_id": collection_id, "source_message_id": source_message_id}
        if await self._client.posts.count_documents(filter_, limit=1) > 0:
            return True
        return await self._client.post_media.count_documents(filter_, limit=1) > 0

    async def save_post(self, post: PostDTO) -> str:
        """Insert a post."""
        await self._client.posts.insert_one(self._model_to_doc(post))
        return post.id

    async def save_post_media(self, media: PostMediaDTO) -> str:
        """Insert a group media row."""
        await self._client.post_media.insert_one(self._model_to_doc(media))
        return media.id

    async def get_posts_for_collection(self, collection_id: str) -> list[PostDTO]:
        """Get all posts of a collection, ordered by publication time."""
        cursor = self._client.posts.find({"collection_id": collection_id}).sort("published_at", 1)
        return [PostDTO.model_validate(self._strip_id(doc)) async for doc in cursor]

    async def get_media_for_post(self, post_id: str) -> list[PostMediaDTO]:
        """Get the media rows of a group post, ordered by order_index."""
        cursor = self._client.post_media.find({"post_id": post_id}).sort("order_index", 1)
        return [PostMediaDTO.model_validate(self._strip_id(doc)) async for doc in cursor]

    # Media group buffer
    async def append_buffer_entry(self, entry: MediaGroupBufferEntryDTO) -> str:
        """Append a media group member to the buffer."""
        await self._client.media_group_buffer.insert_one(self._model_to_doc(entry))
        return entry.id

    async def buffer_entry_exists(
        self,
        media_group_id: str,
        collection_id: str,
        message_id: int,
    ) -> bool:
        """Check if a group member is already buffered."""
        count = await self._client.media_group_buffer.count_documents(
            {
                "media_group_id": media_group_id,
                "collection_id": collection_id,
                "message_id": message_id,
            },
            limit=1,
        )
        return count > 0

    async def get_buffer_entries(
        self,
        media_group_id: str,
        collection_id: str,
    ) -> list[MediaGroupBufferEntryDTO]:
        """Get buffered members of a group, ordered by message ID."""
        cursor = self._client.media_group_buffer.find(
            {"media_group_id": media_group_id, "collection_id": collection_id}
        ).sort("message_id", 1)
        return [
            MediaGroupBufferEntryDTO.model_validate(self._strip_id(doc)) async for doc in cursor
        ]

    async def delete_buffer_entries_by_id(self, entry_ids: list[str]) -> int:
        """Delete the given buffer rows."""
        if not entry_ids:
            return 0
        result = await self._client.media_group_buffer.delete_many({"id": {"$in": entry_ids}})
        return result.deleted_count

    async def purge_buffer_entries(self, received_before: int) -> int:
        """Delete buffer rows that arrived before the given time."""
        result = await self._client.media_group_buffer.delete_many(
            {"received_at": {"$lt": received_before}}
        )
        return result.deleted_count

    # Conversion helpers
    @staticmethod
    def _strip_id(doc: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in doc.items() if k != "_id"}

    @staticmethod
    def _model_to_doc(
        model: ImportSessionDTO | PostDTO | PostMediaDTO | MediaGroupBufferEntryDTO,
    ) -> dict[str, Any]:
        return model.model_dump(mode="json")

    @staticmethod
    def _doc_to_bot(doc: dict[str, Any]) -> BotConfigDTO:
        channel_id = doc.get("channel_id")
        return BotConfigDTO(
            id=doc["id"],
            token=doc.get("token"),
            username=doc.get("username"),
            channel_id=str(channel_id) if channel_id is not None else None,
            collection_id=doc.get("collection_id"),
            is_active=doc.get("is_active", True),
            webhook_status=WebhookStatus(doc.get("webhook_status", WebhookStatus.PENDING)),
            webhook_registered_at=doc.get("webhook_registered_at"),
            webhook_error=doc.get("webhook_error"),
            last_sync_at=doc.get("last_sync_at"),
            schema_version=doc.get("schema_version", 1),
        )

    @staticmethod
    def _doc_to_linked_chat(doc: dict[str, Any]) -> LinkedChatDTO:
        return LinkedChatDTO(
            id=doc["id"],
            bot_id=doc["bot_id"],
            chat_id=doc["chat_id"],
            chat_title=doc.get("chat_title", ""),
            chat_type=doc.get("chat_type", "channel"),
            collection_id=doc.get("collection_id"),
            is_active=doc.get("is_active", True),
            last_sync_at=doc.get("last_sync_at"),
            schema_version=doc.get("schema_version", 1),
        )

    @staticmethod
    def _doc_to_session(doc: dict[str, Any]) -> ImportSessionDTO:
        return ImportSessionDTO(
            id=doc["id"],
            telegram_user_id=doc["telegram_user_id"],
            platform_user_id=doc["platform_user_id"],
            collection_id=doc["collection_id"],
            message_count=doc.get("message_count", 0),
            is_active=doc.get("is_active", True),
            completed_at=doc.get("completed_at"),
            created_at=doc["created_at"],
            schema_version=doc.get("schema_version", 1),
        )
