"""ChannelFeed orchestrator for webhook ingestion.

This module provides the main entry point for the channel_feed package,
wiring storage, object storage and the chat platform into the ingestion
services.
"""

import asyncio
from typing import Any

from pydantic import ValidationError

from channel_feed.config import ChannelFeedConfig
from channel_feed.interfaces.object_storage import ObjectStorageInterface
from channel_feed.interfaces.platform import ChatPlatformInterface
from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger, update_context
from channel_feed.models.feed import PostDTO, PostMediaDTO
from channel_feed.models.telegram import TelegramUpdate
from channel_feed.services.file_storage import FileStorageService
from channel_feed.services.import_session import ImportSessionService
from channel_feed.services.ingestion import IngestionService
from channel_feed.services.media_group import MediaGroupAggregator
from channel_feed.services.router import UpdateRouter
from channel_feed.services.scheduler import FlushScheduler
from channel_feed.services.webhook_registration import (
    RegistrationResult,
    WebhookRegistrationService,
)

__all__ = ["ChannelFeed"]

logger = get_logger(__name__)


class ChannelFeed:
    """Main orchestrator for channel_feed webhook ingestion.

    Accepts implementation classes. Config is loaded from .env automatically.
    For custom implementations, set config_class = None and pass custom_config dict.

    Example:
        async with ChannelFeed(
            storage_class=MongoStorageRepository,
            object_storage_class=S3ObjectStorage,
            platform_class=TelegramBotClient,
        ) as feed:
            feed.dispatch(bot_id, payload)
    """

    def __init__(
        self,
        storage_class: type[StorageInterface],
        object_storage_class: type[ObjectStorageInterface],
        platform_class: type[ChatPlatformInterface],
        *,
        config: ChannelFeedConfig | None = None,
        storage_custom_config: dict[str, Any] | None = None,
        object_storage_custom_config: dict[str, Any] | None = None,
        platform_custom_config: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ChannelFeed with implementation classes.

        Args:
            storage_class: Storage implementation class
            object_storage_class: Object storage implementation class
            platform_class: Chat platform implementation class
            config: Main configuration (loaded from .env if None)
            storage_custom_config: Custom config dict if storage_class.config_class is None
            object_storage_custom_config: Custom config dict if
                object_storage_class.config_class is None
            platform_custom_config: Custom config dict if platform_class.config_class is None
        """
        self._config = config or ChannelFeedConfig()  # Loads from .env

        self._storage_class = storage_class
        self._object_storage_class = object_storage_class
        self._platform_class = platform_class

        self._storage_custom_config = storage_custom_config
        self._object_storage_custom_config = object_storage_custom_config
        self._platform_custom_config = platform_custom_config

        # Instances (created on connect)
        self._storage: StorageInterface | None = None
        self._object_storage: ObjectStorageInterface | None = None
        self._platform: ChatPlatformInterface | None = None

        # Services (wired on connect)
        self._scheduler = FlushScheduler()
        self._aggregator: MediaGroupAggregator | None = None
        self._router: UpdateRouter | None = None
        self._webhooks: WebhookRegistrationService | None = None

        self._tasks: set[asyncio.Task[None]] = set()
        self._connected = False

    @property
    def config(self) -> ChannelFeedConfig:
        return self._config

    async def _instantiate_class(
        self,
        cls: type,
        custom_config: dict[str, Any] | None,
        settings: Any,
    ) -> Any:
        """Instantiate an implementation class.

        If cls.config_class is set, use the matching settings from the main config.
        If cls.config_class is None, use custom_config dict.
        """
        config_class = getattr(cls, "config_class", None)

        if config_class is None:
            # Custom implementation - use dict
            if custom_config is None:
                raise ValueError(
                    f"{cls.__name__} has config_class=None but no custom_config provided"
                )
            return await cls.from_dict(custom_config)
        if custom_config is not None:
            return await cls.from_dict(custom_config)
        if type(settings) is not config_class:
            settings = config_class()
        return await cls.from_config(settings)

    async def _connect(self) -> None:
        """Initialize connections and services."""
        if self._connected:
            return

        # Instantiate implementations
        self._storage = await self._instantiate_class(
            self._storage_class, self._storage_custom_config, self._config.mongo
        )
        self._object_storage = await self._instantiate_class(
            self._object_storage_class, self._object_storage_custom_config, self._config.s3
        )
        self._platform = await self._instantiate_class(
            self._platform_class, self._platform_custom_config, self._config.telegram
        )

        # Wire services
        file_storage = FileStorageService(self._platform, self._object_storage)
        self._aggregator = MediaGroupAggregator(
            self._storage,
            file_storage,
            self._scheduler,
            delay_seconds=self._config.media_group_delay_seconds,
        )
        ingestion = IngestionService(
            self._storage,
            file_storage,
            self._aggregator,
            max_download_bytes=self._config.max_download_bytes,
        )
        import_sessions = ImportSessionService(self._storage, self._platform, ingestion)
        self._router = UpdateRouter(self._storage, ingestion, import_sessions)

        secret = self._config.telegram.webhook_secret
        self._webhooks = WebhookRegistrationService(
            self._storage,
            self._platform,
            secret_token=secret.get_secret_value() if secret else None,
        )

        self._connected = True
        logger.info("channel_feed_connected")

        # Timers of a previous process are gone; their buffers would never flush.
        await self._aggregator.purge_stale(self._config.buffer_ttl_seconds)

    async def _disconnect(self) -> None:
        """Finish outstanding work and close all connections."""
        await self.wait_idle()
        await self._scheduler.shutdown()

        if self._storage and hasattr(self._storage, "close"):
            await self._storage.close()
        if self._object_storage and hasattr(self._object_storage, "close"):
            await self._object_storage.close()
        if self._platform and hasattr(self._platform, "close"):
            await self._platform.close()

        self._connected = False
        logger.info("channel_feed_disconnected")

    async def __aenter__(self) -> "ChannelFeed":
        """Async context manager entry - connects automatically."""
        await self._connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - disconnects automatically."""
        await self._disconnect()

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise RuntimeError(
                "ChannelFeed not connected. Use 'async with ChannelFeed(...) as feed:'"
            )

    # === WEBHOOK PROCESSING ===

    def dispatch(self, bot_id: str, payload: Any) -> asyncio.Task[None]:
        """Process a webhook payload in a detached task.

        The caller acknowledges the delivery without waiting for the task.

        Args:
            bot_id: Bot ID from the webhook path
            payload: Decoded JSON body

        Returns:
            The processing task
        """
        self._ensure_connected()
        task = asyncio.create_task(self._process(bot_id, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _process(self, bot_id: str, payload: Any) -> None:
        try:
            update = TelegramUpdate.model_validate(payload)
        except ValidationError as e:
            logger.warning("invalid_update_payload", bot_id=bot_id, errors=e.error_count())
            return

        with update_context(bot_id, update.update_id):
            try:
                await self.handle_update(bot_id, update)
            except Exception:
                logger.exception("update_processing_failed")

    async def handle_update(self, bot_id: str, update: TelegramUpdate) -> None:
        """Route one validated update and wait for it to be processed.

        Media group flushes scheduled by the update still run later.
        """
        self._ensure_connected()
        assert self._router is not None
        await self._router.route(bot_id, update)

    async def wait_idle(self, include_timers: bool = False) -> None:
        """Wait for detached processing tasks to finish.

        Args:
            include_timers: Also wait for scheduled media group flushes
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        if include_timers:
            await self._scheduler.wait_idle()

    # === WEBHOOK REGISTRATION ===

    async def register_webhook(
        self,
        bot_id: str,
        base_url: str | None = None,
    ) -> RegistrationResult:
        """Register one bot's webhook with the platform.

        Args:
            bot_id: Bot ID
            base_url: Public base URL (defaults to the configured one)
        """
        self._ensure_connected()
        assert self._webhooks is not None
        return await self._webhooks.register(bot_id, self._resolve_base_url(base_url))

    async def register_webhooks(self, base_url: str | None = None) -> list[RegistrationResult]:
        """Register the webhooks of all bots with a token."""
        self._ensure_connected()
        assert self._webhooks is not None
        return await self._webhooks.register_all(self._resolve_base_url(base_url))

    async def get_webhook_info(self, bot_id: str) -> dict[str, Any]:
        """Get the platform's view of one bot's webhook.

        Returns:
            getWebhookInfo result, empty if the bot is unknown or has no token
        """
        self._ensure_connected()
        assert self._storage is not None
        assert self._platform is not None
        bot = await self._storage.get_bot(bot_id)
        if bot is None or not bot.token:
            return {}
        return await self._platform.get_webhook_info(bot.token)

    def _resolve_base_url(self, base_url: str | None) -> str:
        resolved = base_url or self._config.telegram.public_base_url
        if not resolved:
            raise ValueError("No public base URL configured for webhook registration")
        return resolved

    # === RETRIEVAL ===

    async def get_posts(self, collection_id: str) -> list[PostDTO]:
        """Get all posts of a collection."""
        self._ensure_connected()
        assert self._storage is not None
        return await self._storage.get_posts_for_collection(collection_id)

    async def get_post_media(self, post_id: str) -> list[PostMediaDTO]:
        """Get the ordered media of a group post."""
        self._ensure_connected()
        assert self._storage is not None
        return await self._storage.get_media_for_post(post_id)

    async def flush_media_group(
        self,
        media_group_id: str,
        collection_id: str,
        bot_token: str,
    ) -> PostDTO | None:
        """Flush a buffered media group immediately."""
        self._ensure_connected()
        assert self._aggregator is not None
        return await self._aggregator.flush(media_group_id, collection_id, bot_token)
