"""MongoDB client for channel_feed.

This module provides an async MongoDB client wrapper using Motor.
"""

from typing import TYPE_CHECKING, Any

from channel_feed.config import MongoSettings
from channel_feed.logging import get_logger
from channel_feed.utils.lazy_import import lazy_import

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorCollection, AsyncIOMotorDatabase

__all__ = [
    "MongoClient",
]

logger = get_logger(__name__)

get_async_motor = lazy_import("motor.motor_asyncio", "AsyncIOMotorClient", package="motor")


class MongoClient:
    """Async MongoDB client wrapper.

    Provides a connection manager and collection accessors
    for the channel_feed MongoDB database.

    Example:
        client = MongoClient(settings)
        await client.connect()

        # Access collections
        await client.posts.insert_one(post_data)

        await client.disconnect()
    """

    def __init__(self, settings: MongoSettings) -> None:
        """Initialize client with settings.

        Args:
            settings: MongoDB connection settings
        """
        self._settings = settings
        self._client = None
        self._db = None

    async def connect(self) -> None:
        """Initialize connection to MongoDB."""
        if self._client is not None:
            return
        AsyncIOMotorClient = get_async_motor()  # noqa: N806

        uri = self._settings.uri.get_secret_value()
        self._client = AsyncIOMotorClient(uri)
        self._db = self._client[self._settings.database]

        # Verify connection
        await self._client.admin.command("ping")
        logger.info(
            "connected_to_mongodb",
            database=self._settings.database,
        )

    async def disconnect(self) -> None:
        """Close connection to MongoDB."""
        if self._client:
            self._client.close()
            self._client = None
            self._db = None
            logger.info("disconnected_from_mongodb")

    @property
    def db(self) -> "AsyncIOMotorDatabase[dict[str, Any]]":
        """Get database instance.

        Raises:
            RuntimeError: If not connected
        """
        if self._db is None:
            raise RuntimeError("MongoClient not connected. Call connect() first.")
        return self._db

    def _collection(self, name: str) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get collection with optional prefix."""
        full_name = f"{self._settings.collection_prefix}{name}"
        return self.db[full_name]

    @property
    def bots(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get bots collection."""
        return self._collection("bots")

    @property
    def linked_chats(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get linked_chats collection."""
        return self._collection("linked_chats")

    @property
    def users(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get users collection (platform accounts)."""
        return self._collection("users")

    @property
    def collections(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get collections collection (feed targets)."""
        return self._collection("collections")

    @property
    def import_sessions(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get import_sessions collection."""
        return self._collection("import_sessions")

    @property
    def media_group_buffer(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get media_group_buffer collection."""
        return self._collection("media_group_buffer")

    @property
    def posts(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get posts collection."""
        return self._collection("posts")

    @property
    def post_media(self) -> "AsyncIOMotorCollection[dict[str, Any]]":
        """Get post_media collection."""
        return self._collection("post_media")

    async def create_indexes(self) -> None:
        """Create indexes for all collections."""
        # Bot configuration indexes
        await self.bots.create_index("id", unique=True)
        await self.linked_chats.create_index("id", unique=True)
        await self.linked_chats.create_index([("bot_id", 1), ("chat_id", 1)], unique=True)

        # Account indexes
        await self.users.create_index("telegram_user_id")
        await self.collections.create_index("id", unique=True)

        # Import session indexes
        await self.import_sessions.create_index("id", unique=True)
        await self.import_sessions.create_index([("telegram_user_id", 1), ("is_active", 1)])

        # Media group buffer indexes
        await self.media_group_buffer.create_index(
            [("media_group_id", 1), ("collection_id", 1), ("message_id", 1)]
        )
        await self.media_group_buffer.create_index("received_at")

        # Post indexes
        await self.posts.create_index("id", unique=True)
        await self.posts.create_index([("collection_id", 1), ("source_message_id", 1)])
        await self.posts.create_index([("collection_id", 1), ("published_at", 1)])
        await self.post_media.create_index("id", unique=True)
        await self.post_media.create_index([("post_id", 1), ("order_index", 1)])
        await self.post_media.create_index([("collection_id", 1), ("source_message_id", 1)])

        logger.info("created_mongodb_indexes")

    async def __aenter__(self) -> "MongoClient":
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.disconnect()
