"""Unit tests for the import session workflow."""

import pytest
from mocks.mock_platform import FakePlatform
from mocks.mock_storage import InMemoryStorage
from mocks.telegram_payloads import (
    BASE_DATE,
    BOT_TOKEN,
    COLLECTION_ID,
    COLLECTION_TITLE,
    USER_ID,
    channel_post,
    forwarded_message,
    photo,
    private_message,
)

from channel_feed.messages import (
    BUTTON_START_IMPORT,
    BUTTON_STATUS,
    BUTTON_STOP_IMPORT,
    HELP_TEXT,
    IMPORT_ACCOUNT_NOT_LINKED,
    IMPORT_COLLECTION_NOT_FOUND,
    NO_ACTIVE_IMPORT,
    NO_ACTIVE_IMPORT_STATUS,
)
from channel_feed.models.bot import BotConfigDTO
from channel_feed.models.session import SessionState
from channel_feed.models.telegram import TelegramMessage
from channel_feed.services.import_session import (
    ImportSessionService,
    normalize_command,
    parse_command,
)
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.services.scheduler import FlushScheduler


def _text(text: str, user_id: int = USER_ID) -> TelegramMessage:
    return TelegramMessage.model_validate(private_message(1, user_id=user_id, text=text))


class TestCommandParsing:
    """Tests for command normalization."""

    def test_button_labels(self) -> None:
        assert normalize_command(BUTTON_START_IMPORT) == "/import"
        assert normalize_command(BUTTON_STOP_IMPORT) == "/done"
        assert normalize_command(f"  {BUTTON_STATUS} ") == "/status"

    def test_plain_text_unchanged(self) -> None:
        assert normalize_command("hello") == "hello"

    def test_parse_command(self) -> None:
        assert parse_command("/import") == "/import"
        assert parse_command("/import@feed_test_bot") == "/import"
        assert parse_command("/STATUS now") == "/status"
        assert parse_command(BUTTON_STOP_IMPORT) == "/done"
        assert parse_command("just text") is None


class TestStart:
    """Tests for starting a session."""

    @pytest.mark.asyncio
    async def test_start_creates_active_session(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))

        session = await storage.get_active_session(USER_ID)
        assert session is not None
        assert session.state == SessionState.ACTIVE
        assert session.message_count == 0
        assert session.collection_id == COLLECTION_ID
        assert COLLECTION_TITLE in platform.last_text
        assert platform.sent[-1].reply_markup is not None

    @pytest.mark.asyncio
    async def test_start_closes_previous_session(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))
        first = await storage.get_active_session(USER_ID)
        await import_sessions.handle_text(sample_bot, _text(BUTTON_START_IMPORT))
        second = await storage.get_active_session(USER_ID)

        assert first is not None and second is not None
        assert first.id != second.id
        assert storage.sessions[first.id].state == SessionState.COMPLETED
        assert storage.sessions[first.id].completed_at is not None
        assert sum(s.is_active for s in storage.sessions.values()) == 1

    @pytest.mark.asyncio
    async def test_start_without_collection(
        self,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        bot = BotConfigDTO(id="bot-2", token="t")

        await import_sessions.handle_text(bot, _text("/import"))

        assert platform.last_text == IMPORT_COLLECTION_NOT_FOUND
        assert storage.sessions == {}

    @pytest.mark.asyncio
    async def test_start_unlinked_account(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import", user_id=999))

        assert platform.last_text == IMPORT_ACCOUNT_NOT_LINKED
        assert storage.sessions == {}


class TestStatusAndStop:
    """Tests for status and stop commands."""

    @pytest.mark.asyncio
    async def test_status_without_session(
        self,
        sample_bot: BotConfigDTO,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/status"))
        assert platform.last_text == NO_ACTIVE_IMPORT_STATUS

    @pytest.mark.asyncio
    async def test_status_reports_counter(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))
        session = await storage.get_active_session(USER_ID)
        assert session is not None
        await storage.increment_session_counter(session.id)
        await storage.increment_session_counter(session.id)

        await import_sessions.handle_text(sample_bot, _text("/status"))

        assert COLLECTION_TITLE in platform.last_text
        assert "<b>2</b>" in platform.last_text

    @pytest.mark.asyncio
    async def test_stop_without_session(
        self,
        sample_bot: BotConfigDTO,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/done"))
        assert platform.last_text == NO_ACTIVE_IMPORT

    @pytest.mark.asyncio
    async def test_stop_completes_session(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))
        session = await storage.get_active_session(USER_ID)
        assert session is not None

        await import_sessions.handle_text(sample_bot, _text("/stop"))

        assert await storage.get_active_session(USER_ID) is None
        assert storage.sessions[session.id].state == SessionState.COMPLETED
        assert "<b>0</b>" in platform.last_text


class TestOtherText:
    """Tests for help and plain text."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["/start", "/help", "/unknown"])
    async def test_usage_commands(
        self,
        text: str,
        sample_bot: BotConfigDTO,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text(text))
        assert platform.last_text == HELP_TEXT

    @pytest.mark.asyncio
    async def test_plain_text_without_session_gets_usage(
        self,
        sample_bot: BotConfigDTO,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("hello"))
        assert platform.last_text == HELP_TEXT

    @pytest.mark.asyncio
    async def test_plain_text_during_session_is_ignored(
        self,
        sample_bot: BotConfigDTO,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))
        sent = len(platform.sent)

        await import_sessions.handle_text(sample_bot, _text("hello"))

        assert len(platform.sent) == sent


class TestForward:
    """Tests for forwarded messages."""

    @pytest.mark.asyncio
    async def test_forward_without_session_is_ignored(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        import_sessions: ImportSessionService,
    ) -> None:
        message = TelegramMessage.model_validate(forwarded_message(5, text="old post"))

        assert await import_sessions.handle_forward(sample_bot, message) is None
        assert storage.posts == {}

    @pytest.mark.asyncio
    async def test_forward_is_imported_and_counted(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        import_sessions: ImportSessionService,
    ) -> None:
        platform.add_file("p1", b"img")
        await import_sessions.handle_text(sample_bot, _text("/import"))
        message = TelegramMessage.model_validate(
            forwarded_message(5, forward_date=1700000000, photo=photo(file_id="p1"))
        )

        outcome = await import_sessions.handle_forward(sample_bot, message)

        assert outcome is IngestOutcome.CREATED
        [post] = storage.posts_in(COLLECTION_ID)
        assert post.published_at == 1700000000
        session = await storage.get_active_session(USER_ID)
        assert session is not None
        assert session.message_count == 1

    @pytest.mark.asyncio
    async def test_forward_sharing_channel_message_id_is_imported(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        ingestion: IngestionService,
        import_sessions: ImportSessionService,
    ) -> None:
        await ingestion.ingest(
            TelegramMessage.model_validate(channel_post(7, text="Channel post")),
            BOT_TOKEN,
            COLLECTION_ID,
            BASE_DATE,
        )
        platform.add_file("p7", b"img")
        await import_sessions.handle_text(sample_bot, _text("/import"))
        message = TelegramMessage.model_validate(
            forwarded_message(7, photo=photo(file_id="p7"))
        )

        outcome = await import_sessions.handle_forward(sample_bot, message)

        assert outcome is IngestOutcome.CREATED
        posts = storage.posts_in(COLLECTION_ID)
        assert sorted(p.source_message_id for p in posts) == [7, 7]
        session = await storage.get_active_session(USER_ID)
        assert session is not None
        assert session.message_count == 1

    @pytest.mark.asyncio
    async def test_forwarded_group_sharing_channel_message_id_is_imported(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        platform: FakePlatform,
        scheduler: FlushScheduler,
        ingestion: IngestionService,
        import_sessions: ImportSessionService,
    ) -> None:
        await ingestion.ingest(
            TelegramMessage.model_validate(channel_post(7, text="Channel post")),
            BOT_TOKEN,
            COLLECTION_ID,
            BASE_DATE,
        )
        await import_sessions.handle_text(sample_bot, _text("/import"))
        for message_id in (7, 8):
            platform.add_file(f"p{message_id}", b"img")
            message = TelegramMessage.model_validate(
                forwarded_message(
                    message_id, photo=photo(file_id=f"p{message_id}"), media_group_id="mg-f"
                )
            )
            outcome = await import_sessions.handle_forward(sample_bot, message)
            assert outcome is IngestOutcome.BUFFERED

        await scheduler.wait_idle()

        [album] = [p for p in storage.posts_in(COLLECTION_ID) if p.media_group_id == "mg-f"]
        assert album.media_count == 2
        assert album.source_message_id == 7
        session = await storage.get_active_session(USER_ID)
        assert session is not None
        assert session.message_count == 2

    @pytest.mark.asyncio
    async def test_redelivered_group_member_is_not_counted(
        self,
        sample_bot: BotConfigDTO,
        storage: InMemoryStorage,
        scheduler: FlushScheduler,
        import_sessions: ImportSessionService,
    ) -> None:
        await import_sessions.handle_text(sample_bot, _text("/import"))
        message = TelegramMessage.model_validate(
            forwarded_message(5, photo=photo(), media_group_id="mg-f")
        )

        await import_sessions.handle_forward(sample_bot, message)
        outcome = await import_sessions.handle_forward(sample_bot, message)

        assert outcome is IngestOutcome.DUPLICATE
        session = await storage.get_active_session(USER_ID)
        assert session is not None
        assert session.message_count == 1
        await scheduler.shutdown()
