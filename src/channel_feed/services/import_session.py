"""Import session service for channel_feed.

This module drives the per-user workflow that lets an operator forward
historical channel content to the bot in private chat and have it imported
into the collection bound to the bot.
"""

from enum import StrEnum

from channel_feed.interfaces.platform import ChatPlatformInterface
from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.messages import (
    BUTTON_COMMANDS,
    DOWNLOAD_FAILED_FORWARDED,
    HELP_TEXT,
    IMPORT_ACCOUNT_NOT_LINKED,
    IMPORT_COLLECTION_NOT_FOUND,
    NO_ACTIVE_IMPORT,
    NO_ACTIVE_IMPORT_STATUS,
    import_completed,
    import_started,
    import_status,
    main_menu_keyboard,
)
from channel_feed.models.bot import BotConfigDTO
from channel_feed.models.session import ImportSessionDTO
from channel_feed.models.telegram import TelegramMessage
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.utils.ids import generate_id, now_epoch

__all__ = [
    "Command",
    "ImportSessionService",
    "normalize_command",
    "parse_command",
]

logger = get_logger(__name__)


class Command(StrEnum):
    """Canonical operator commands."""

    START = "/start"
    HELP = "/help"
    IMPORT = "/import"
    DONE = "/done"
    STOP = "/stop"
    STATUS = "/status"


def normalize_command(text: str) -> str:
    """Map a reply keyboard label to its command, other text unchanged."""
    stripped = text.strip()
    return BUTTON_COMMANDS.get(stripped, stripped)


def parse_command(text: str) -> str | None:
    """Extract the command word of a message.

    The ``@botname`` suffix and any arguments are dropped:
    ``"/import@feed_bot now"`` yields ``"/import"``.

    Returns:
        Lower-cased command, or None if the text is not a command
    """
    text = normalize_command(text)
    if not text.startswith("/"):
        return None
    word = text.split(maxsplit=1)[0]
    return word.split("@", 1)[0].lower()


class ImportSessionService:
    """Import session state machine.

    A user has at most one active session. Starting a new one completes
    the previous one; completed sessions are never reactivated. Every reply
    carries the main menu keyboard.

    Example:
        service = ImportSessionService(storage, platform, ingestion)
        await service.handle_text(bot, message)
    """

    def __init__(
        self,
        storage: StorageInterface,
        platform: ChatPlatformInterface,
        ingestion: IngestionService,
    ) -> None:
        """Initialize service with dependencies.

        Args:
            storage: Storage for sessions, accounts and collections
            platform: Chat platform used for replies
            ingestion: Ingestion pipeline for forwarded messages
        """
        self._storage = storage
        self._platform = platform
        self._ingestion = ingestion

    async def _reply(self, bot: BotConfigDTO, chat_id: int, text: str) -> None:
        assert bot.token is not None
        await self._platform.send_message(bot.token, chat_id, text, main_menu_keyboard())

    async def handle_text(self, bot: BotConfigDTO, message: TelegramMessage) -> None:
        """Dispatch a private, non-forwarded text message.

        Args:
            bot: Receiving bot
            message: Private message with text
        """
        if message.from_user is None or message.text is None:
            return

        user_id = message.from_user.id
        chat_id = message.chat.id
        command = parse_command(message.text)

        match command:
            case Command.IMPORT:
                await self.start(bot, user_id, chat_id)
            case Command.DONE | Command.STOP:
                await self.stop(bot, user_id, chat_id)
            case Command.STATUS:
                await self.status(bot, user_id, chat_id)
            case None:
                if await self._storage.get_active_session(user_id) is None:
                    await self._reply(bot, chat_id, HELP_TEXT)
            case _:
                await self._reply(bot, chat_id, HELP_TEXT)

    async def start(
        self,
        bot: BotConfigDTO,
        telegram_user_id: int,
        chat_id: int,
    ) -> ImportSessionDTO | None:
        """Start a new import session into the bot's collection.

        Returns:
            The new session, or None if the preconditions were not met
        """
        if not bot.collection_id:
            logger.warning("import_without_collection", bot_id=bot.id)
            await self._reply(bot, chat_id, IMPORT_COLLECTION_NOT_FOUND)
            return None

        platform_user_id = await self._storage.find_platform_user_id(telegram_user_id)
        if platform_user_id is None:
            logger.info("import_account_not_linked", telegram_user_id=telegram_user_id)
            await self._reply(bot, chat_id, IMPORT_ACCOUNT_NOT_LINKED)
            return None

        now = now_epoch()
        closed = await self._storage.complete_active_sessions(telegram_user_id, now)

        session = ImportSessionDTO(
            id=generate_id(),
            telegram_user_id=telegram_user_id,
            platform_user_id=platform_user_id,
            collection_id=bot.collection_id,
            created_at=now,
        )
        await self._storage.save_session(session)

        title = await self._storage.get_collection_title(bot.collection_id)
        await self._reply(bot, chat_id, import_started(title or bot.collection_id))

        logger.info(
            "import_session_started",
            session_id=session.id,
            telegram_user_id=telegram_user_id,
            collection_id=bot.collection_id,
            closed_previous=closed,
        )
        return session

    async def status(self, bot: BotConfigDTO, telegram_user_id: int, chat_id: int) -> None:
        """Report the active session's collection and counter."""
        session = await self._storage.get_active_session(telegram_user_id)
        if session is None:
            await self._reply(bot, chat_id, NO_ACTIVE_IMPORT_STATUS)
            return

        title = await self._storage.get_collection_title(session.collection_id)
        await self._reply(
            bot,
            chat_id,
            import_status(title or session.collection_id, session.message_count),
        )

    async def stop(
        self,
        bot: BotConfigDTO,
        telegram_user_id: int,
        chat_id: int,
    ) -> ImportSessionDTO | None:
        """Complete the active session and report its final counter.

        Returns:
            The session as it was before completion, or None if none was active
        """
        session = await self._storage.get_active_session(telegram_user_id)
        if session is None:
            await self._reply(bot, chat_id, NO_ACTIVE_IMPORT)
            return None

        await self._storage.complete_session(session.id, now_epoch())
        await self._reply(bot, chat_id, import_completed(session.message_count))

        logger.info(
            "import_session_completed",
            session_id=session.id,
            message_count=session.message_count,
        )
        return session

    async def handle_forward(
        self,
        bot: BotConfigDTO,
        message: TelegramMessage,
    ) -> IngestOutcome | None:
        """Ingest a forwarded message into the sender's active session.

        The session counter is incremented only for accepted messages.

        Returns:
            IngestOutcome, or None if the sender has no active session
        """
        if message.from_user is None:
            return None
        session = await self._storage.get_active_session(message.from_user.id)
        if session is None:
            logger.debug("forward_without_session", telegram_user_id=message.from_user.id)
            return None

        assert bot.token is not None
        outcome = await self._ingestion.ingest(
            message,
            bot.token,
            session.collection_id,
            message.forwarded_at,
            DOWNLOAD_FAILED_FORWARDED,
            suppress_duplicates=False,
        )
        if outcome.accepted:
            count = await self._storage.increment_session_counter(session.id)
            logger.info(
                "forward_imported",
                session_id=session.id,
                message_id=message.message_id,
                outcome=outcome.value,
                message_count=count,
            )
        return outcome
