"""Webhook update routing for channel_feed.

This module resolves the receiving bot and dispatches an update to channel
ingestion or to the import session workflow.
"""

from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.models.bot import BotConfigDTO
from channel_feed.models.telegram import TelegramMessage, TelegramUpdate
from channel_feed.services.import_session import ImportSessionService
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.utils.ids import now_epoch

__all__ = [
    "UpdateRouter",
]

logger = get_logger(__name__)


class UpdateRouter:
    """Routes webhook updates of configured bots.

    Channel posts go to the bot's primary collection if the channel is the
    bot's bound channel, otherwise to every active linked chat binding of
    that channel, whichever bot owns the binding. Private messages drive
    the import session workflow.

    Example:
        router = UpdateRouter(storage, ingestion, import_sessions)
        await router.route(bot_id, update)
    """

    def __init__(
        self,
        storage: StorageInterface,
        ingestion: IngestionService,
        import_sessions: ImportSessionService,
    ) -> None:
        """Initialize router with dependencies.

        Args:
            storage: Storage for bot configuration and bindings
            ingestion: Ingestion pipeline for channel posts
            import_sessions: Import session state machine
        """
        self._storage = storage
        self._ingestion = ingestion
        self._import_sessions = import_sessions

    async def route(self, bot_id: str, update: TelegramUpdate) -> None:
        """Route one update.

        Args:
            bot_id: Bot ID from the webhook path
            update: Validated update envelope
        """
        bot = await self._storage.get_bot(bot_id)
        if bot is None or not bot.is_active or not bot.token:
            logger.warning(
                "bot_not_available",
                bot_id=bot_id,
                found=bot is not None,
                update_id=update.update_id,
            )
            return

        message = update.effective_message
        if update.is_channel_post:
            assert message is not None
            await self._route_channel_post(bot, message)
            return

        if message is None or not message.is_private:
            logger.debug("update_ignored", bot_id=bot_id, update_id=update.update_id)
            return

        if message.is_forwarded:
            await self._import_sessions.handle_forward(bot, message)
        elif message.text:
            await self._import_sessions.handle_text(bot, message)

    async def _route_channel_post(self, bot: BotConfigDTO, post: TelegramMessage) -> None:
        assert bot.token is not None

        if bot.is_primary_channel(post.chat.id) and bot.collection_id:
            outcome = await self._ingestion.ingest(
                post, bot.token, bot.collection_id, post.date
            )
            if outcome is IngestOutcome.CREATED:
                await self._storage.touch_bot_sync(bot.id, now_epoch())
            logger.info(
                "channel_post_routed",
                bot_id=bot.id,
                chat_id=post.chat.id,
                collection_id=bot.collection_id,
                outcome=outcome.value,
            )
            return

        linked_chats = await self._storage.find_linked_chats(post.chat.id)
        if not linked_chats:
            logger.debug("channel_not_bound", bot_id=bot.id, chat_id=post.chat.id)
            return

        for linked_chat in linked_chats:
            if not linked_chat.collection_id:
                continue
            try:
                outcome = await self._ingestion.ingest(
                    post, bot.token, linked_chat.collection_id, post.date
                )
            except Exception:
                logger.exception(
                    "linked_chat_ingest_failed",
                    linked_chat_id=linked_chat.id,
                    collection_id=linked_chat.collection_id,
                )
                continue
            if outcome.accepted:
                await self._storage.touch_linked_chat_sync(linked_chat.id, now_epoch())
            logger.info(
                "linked_chat_post_routed",
                linked_chat_id=linked_chat.id,
                collection_id=linked_chat.collection_id,
                outcome=outcome.value,
            )
