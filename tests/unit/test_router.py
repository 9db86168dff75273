"""Unit tests for UpdateRouter."""

from unittest.mock import AsyncMock

import pytest
from mocks.mock_platform import FakePlatform
from mocks.mock_storage import InMemoryStorage
from mocks.telegram_payloads import (
    BOT_TOKEN,
    CHANNEL_ID,
    COLLECTION_ID,
    USER_ID,
    channel_post,
    forwarded_message,
    private_message,
    update,
)

from channel_feed.messages import HELP_TEXT
from channel_feed.models.bot import BotConfigDTO, LinkedChatDTO
from channel_feed.models.telegram import TelegramUpdate
from channel_feed.services.import_session import ImportSessionService
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.services.router import UpdateRouter
from channel_feed.services.scheduler import FlushScheduler

OTHER_CHANNEL_ID = -1009876543210


def _update(**kwargs: object) -> TelegramUpdate:
    return TelegramUpdate.model_validate(update(**kwargs))


def _linked(
    linked_id: str,
    collection_id: str | None,
    *,
    chat_id: int = OTHER_CHANNEL_ID,
    is_active: bool = True,
    bot_id: str = "bot-1",
) -> LinkedChatDTO:
    return LinkedChatDTO(
        id=linked_id,
        bot_id=bot_id,
        chat_id=chat_id,
        collection_id=collection_id,
        is_active=is_active,
    )


class TestBotResolution:
    """Tests for bot lookup."""

    @pytest.mark.asyncio
    async def test_unknown_bot_is_ignored(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        await router.route("missing", _update(channel_post=channel_post(1, text="x")))
        assert storage.posts == {}

    @pytest.mark.asyncio
    async def test_inactive_bot_is_ignored(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        storage.add_bot(
            BotConfigDTO(
                id="bot-off",
                token=BOT_TOKEN,
                channel_id=str(CHANNEL_ID),
                collection_id=COLLECTION_ID,
                is_active=False,
            )
        )

        await router.route("bot-off", _update(channel_post=channel_post(1, text="x")))

        assert storage.posts == {}

    @pytest.mark.asyncio
    async def test_bot_without_token_is_ignored(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        storage.add_bot(
            BotConfigDTO(id="bot-nt", channel_id=str(CHANNEL_ID), collection_id=COLLECTION_ID)
        )

        await router.route("bot-nt", _update(channel_post=channel_post(1, text="x")))

        assert storage.posts == {}


class TestChannelPosts:
    """Tests for channel post routing."""

    @pytest.mark.asyncio
    async def test_primary_channel_post_is_ingested(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        await router.route("bot-1", _update(channel_post=channel_post(7, text="Hi", date=1700)))

        [post] = storage.posts_in(COLLECTION_ID)
        assert post.source_message_id == 7
        assert post.published_at == 1700
        assert storage.bots["bot-1"].last_sync_at is not None

    @pytest.mark.asyncio
    async def test_duplicate_primary_post_does_not_touch_sync(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        payload = _update(channel_post=channel_post(7, text="Hi"))
        await router.route("bot-1", payload)
        storage.bots["bot-1"] = storage.bots["bot-1"].model_copy(update={"last_sync_at": None})

        await router.route("bot-1", payload)

        assert len(storage.posts_in(COLLECTION_ID)) == 1
        assert storage.bots["bot-1"].last_sync_at is None

    @pytest.mark.asyncio
    async def test_linked_chat_fan_out(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        storage.add_linked_chat(_linked("lc-1", "c-a"))
        storage.add_linked_chat(_linked("lc-2", "c-b"))
        storage.add_linked_chat(_linked("lc-3", "c-c", is_active=False))
        storage.add_linked_chat(_linked("lc-4", None))
        storage.add_linked_chat(_linked("lc-5", "c-d", bot_id="bot-2"))

        await router.route(
            "bot-1",
            _update(channel_post=channel_post(3, chat_id=OTHER_CHANNEL_ID, text="Shared")),
        )

        assert len(storage.posts_in("c-a")) == 1
        assert len(storage.posts_in("c-b")) == 1
        assert len(storage.posts_in("c-d")) == 1
        assert storage.posts_in("c-c") == []
        assert storage.posts_in(COLLECTION_ID) == []
        assert storage.linked_chats["lc-1"].last_sync_at is not None
        assert storage.linked_chats["lc-2"].last_sync_at is not None
        assert storage.linked_chats["lc-3"].last_sync_at is None

    @pytest.mark.asyncio
    async def test_unbound_channel_is_ignored(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        await router.route(
            "bot-1",
            _update(channel_post=channel_post(3, chat_id=OTHER_CHANNEL_ID, text="Nobody")),
        )
        assert storage.posts == {}

    @pytest.mark.asyncio
    async def test_linked_chat_failure_does_not_stop_others(
        self,
        storage: InMemoryStorage,
        import_sessions: ImportSessionService,
    ) -> None:
        storage.add_linked_chat(_linked("lc-1", "c-a"))
        storage.add_linked_chat(_linked("lc-2", "c-b"))
        ingestion = AsyncMock(spec=IngestionService)
        ingestion.ingest.side_effect = [RuntimeError("storage down"), IngestOutcome.CREATED]
        router = UpdateRouter(storage, ingestion, import_sessions)

        await router.route(
            "bot-1",
            _update(channel_post=channel_post(3, chat_id=OTHER_CHANNEL_ID, text="x")),
        )

        assert ingestion.ingest.await_count == 2
        assert storage.linked_chats["lc-1"].last_sync_at is None
        assert storage.linked_chats["lc-2"].last_sync_at is not None

    @pytest.mark.asyncio
    async def test_group_member_is_buffered_per_collection(
        self,
        storage: InMemoryStorage,
        scheduler: FlushScheduler,
        router: UpdateRouter,
    ) -> None:
        storage.add_linked_chat(_linked("lc-1", "c-a"))
        storage.add_linked_chat(_linked("lc-2", "c-b"))

        await router.route(
            "bot-1",
            _update(
                channel_post=channel_post(
                    3, chat_id=OTHER_CHANNEL_ID, photo=[{"file_id": "p"}], media_group_id="mg"
                )
            ),
        )

        assert sorted(e.collection_id for e in storage.buffer) == ["c-a", "c-b"]
        assert scheduler.pending_count == 2
        await scheduler.shutdown()


class TestPrivateMessages:
    """Tests for private message routing."""

    @pytest.mark.asyncio
    async def test_text_goes_to_session_workflow(
        self,
        platform: FakePlatform,
        router: UpdateRouter,
    ) -> None:
        await router.route("bot-1", _update(message=private_message(1, text="/help")))

        assert platform.sent[-1].chat_id == USER_ID
        assert platform.last_text == HELP_TEXT

    @pytest.mark.asyncio
    async def test_forward_is_imported_during_session(
        self,
        storage: InMemoryStorage,
        router: UpdateRouter,
    ) -> None:
        await router.route("bot-1", _update(message=private_message(1, text="/import")))
        await router.route(
            "bot-1",
            _update(update_id=2, message=forwarded_message(2, text="Archived", forward_date=1600)),
        )

        [post] = storage.posts_in(COLLECTION_ID)
        assert post.text_content == "Archived"
        assert post.published_at == 1600

    @pytest.mark.asyncio
    async def test_forwarded_command_is_not_a_command(
        self,
        storage: InMemoryStorage,
        platform: FakePlatform,
        router: UpdateRouter,
    ) -> None:
        await router.route("bot-1", _update(message=forwarded_message(2, text="/import")))

        assert storage.sessions == {}
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_group_chat_message_is_ignored(
        self,
        platform: FakePlatform,
        router: UpdateRouter,
    ) -> None:
        message = private_message(1, text="/help")
        message["chat"] = {"id": -42, "type": "supergroup"}

        await router.route("bot-1", _update(message=message))

        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_private_sticker_is_ignored(
        self,
        platform: FakePlatform,
        router: UpdateRouter,
    ) -> None:
        await router.route("bot-1", _update(message=private_message(1, sticker={"file_id": "s"})))
        assert platform.sent == []
