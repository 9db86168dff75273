"""Unit tests for IngestionService."""

import pytest
from mocks.mock_platform import FakePlatform
from mocks.mock_storage import InMemoryStorage
from mocks.telegram_payloads import BOT_TOKEN, channel_post, photo, video

from channel_feed.messages import DOWNLOAD_FAILED, DOWNLOAD_FAILED_FORWARDED
from channel_feed.models.media import MediaKind
from channel_feed.models.telegram import TelegramMessage
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.services.scheduler import FlushScheduler


def _message(message_id: int, **fields: object) -> TelegramMessage:
    return TelegramMessage.model_validate(channel_post(message_id, **fields))


class TestIngest:
    """Tests for single-message ingestion."""

    @pytest.mark.asyncio
    async def test_text_post(
        self,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        outcome = await ingestion.ingest(_message(1, text="Hello"), BOT_TOKEN, "c1", 1704067200)

        assert outcome is IngestOutcome.CREATED
        [post] = storage.posts_in("c1")
        assert post.text_content == "Hello"
        assert post.media_type is None
        assert post.source_message_id == 1
        assert post.published_at == 1704067200

    @pytest.mark.asyncio
    async def test_photo_post_is_stored(
        self,
        platform: FakePlatform,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        platform.add_file("p1", b"img")

        outcome = await ingestion.ingest(
            _message(2, photo=photo(file_id="p1"), caption="Look"),
            BOT_TOKEN,
            "c1",
            1704067200,
        )

        assert outcome is IngestOutcome.CREATED
        [post] = storage.posts_in("c1")
        assert post.media_type == MediaKind.IMAGE
        assert post.text_content == "Look"
        assert post.storage_path is not None
        assert post.storage_path.startswith("c1/telegram/")
        assert post.has_error is False

    @pytest.mark.asyncio
    async def test_redelivery_is_suppressed(
        self,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        message = _message(42, text="Once")

        first = await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067200)
        second = await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067200)

        assert first is IngestOutcome.CREATED
        assert second is IngestOutcome.DUPLICATE
        assert not second.accepted
        assert len(storage.posts_in("c1")) == 1

    @pytest.mark.asyncio
    async def test_existing_message_id_kept_when_not_suppressing(
        self,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        await ingestion.ingest(_message(42, text="Channel"), BOT_TOKEN, "c1", 1704067200)

        outcome = await ingestion.ingest(
            _message(42, text="Forwarded"),
            BOT_TOKEN,
            "c1",
            1704067200,
            suppress_duplicates=False,
        )

        assert outcome is IngestOutcome.CREATED
        texts = sorted(p.text_content for p in storage.posts_in("c1"))
        assert texts == ["Channel", "Forwarded"]

    @pytest.mark.asyncio
    async def test_same_message_in_two_collections(
        self,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        message = _message(42, text="Fan-out")

        await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067200)
        await ingestion.ingest(message, BOT_TOKEN, "c2", 1704067200)

        assert len(storage.posts_in("c1")) == 1
        assert len(storage.posts_in("c2")) == 1

    @pytest.mark.asyncio
    async def test_oversized_video_is_flagged_without_retrieval(
        self,
        platform: FakePlatform,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        message = _message(3, video=video(file_id="big", file_size=25_165_824))

        await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067200)

        [post] = storage.posts_in("c1")
        assert post.media_type == MediaKind.VIDEO
        assert post.has_error is True
        assert post.error_message is not None
        assert "24.00 MB" in post.error_message
        assert post.storage_path is None
        assert platform.resolved == []

    @pytest.mark.asyncio
    async def test_failed_download_uses_given_message(
        self,
        storage: InMemoryStorage,
        ingestion: IngestionService,
    ) -> None:
        await ingestion.ingest(
            _message(4, photo=photo(file_id="gone")),
            BOT_TOKEN,
            "c1",
            1704067200,
            DOWNLOAD_FAILED_FORWARDED,
        )

        [post] = storage.posts_in("c1")
        assert post.has_error is True
        assert post.error_message == DOWNLOAD_FAILED_FORWARDED
        assert post.error_message != DOWNLOAD_FAILED


class TestIngestGroupMember:
    """Tests for group member ingestion."""

    @pytest.mark.asyncio
    async def test_group_member_is_buffered(
        self,
        storage: InMemoryStorage,
        scheduler: FlushScheduler,
        ingestion: IngestionService,
    ) -> None:
        message = _message(10, photo=photo(), media_group_id="mg1", caption="Album")

        outcome = await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067100)

        assert outcome is IngestOutcome.BUFFERED
        assert outcome.accepted
        [entry] = storage.buffer
        assert entry.media_group_id == "mg1"
        assert entry.caption == "Album"
        assert entry.message_date == 1704067100
        assert entry.media.media_type == MediaKind.IMAGE
        assert storage.posts_in("c1") == []
        await scheduler.shutdown()

    @pytest.mark.asyncio
    async def test_redelivered_group_member_is_duplicate(
        self,
        scheduler: FlushScheduler,
        ingestion: IngestionService,
    ) -> None:
        message = _message(10, photo=photo(), media_group_id="mg1")

        await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067100)
        outcome = await ingestion.ingest(message, BOT_TOKEN, "c1", 1704067100)

        assert outcome is IngestOutcome.DUPLICATE
        await scheduler.shutdown()
