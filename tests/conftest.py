"""Shared test fixtures for channel_feed.

This module provides pytest fixtures used across all tests.
"""

from unittest.mock import AsyncMock

import pytest
from mocks.mock_platform import FakePlatform, InMemoryObjectStorage
from mocks.mock_storage import InMemoryStorage
from mocks.telegram_payloads import (
    BOT_TOKEN,
    CHANNEL_ID,
    COLLECTION_ID,
    COLLECTION_TITLE,
    PLATFORM_USER_ID,
    USER_ID,
)

from channel_feed.models.bot import BotConfigDTO
from channel_feed.services.file_storage import FileStorageService
from channel_feed.services.import_session import ImportSessionService
from channel_feed.services.ingestion import IngestionService
from channel_feed.services.media_group import MediaGroupAggregator
from channel_feed.services.router import UpdateRouter
from channel_feed.services.scheduler import FlushScheduler

# Short quiescence window so timer-driven tests stay fast
TEST_GROUP_DELAY = 0.05


# Mock fixtures
@pytest.fixture
def mock_storage() -> AsyncMock:
    """Create mock storage interface."""
    storage = AsyncMock()
    storage.get_bot.return_value = None
    storage.post_exists.return_value = False
    storage.buffer_entry_exists.return_value = False
    storage.get_buffer_entries.return_value = []
    storage.get_active_session.return_value = None
    storage.find_linked_chats.return_value = []
    storage.delete_buffer_entries_by_id.return_value = 0
    storage.purge_buffer_entries.return_value = 0
    return storage


@pytest.fixture
def mock_platform() -> AsyncMock:
    """Create mock chat platform interface."""
    platform = AsyncMock()
    platform.resolve_download_location.return_value = "https://files.test/file"
    platform.fetch_file.return_value = b"data"
    platform.send_message.return_value = True
    return platform


# In-memory fixtures
@pytest.fixture
def sample_bot() -> BotConfigDTO:
    """Create sample bot bound to the test channel and collection."""
    return BotConfigDTO(
        id="bot-1",
        token=BOT_TOKEN,
        username="feed_test_bot",
        channel_id=str(CHANNEL_ID),
        collection_id=COLLECTION_ID,
    )


@pytest.fixture
def storage(sample_bot: BotConfigDTO) -> InMemoryStorage:
    """Create in-memory storage seeded with a bot, its collection and a linked user."""
    storage = InMemoryStorage()
    storage.add_bot(sample_bot)
    storage.add_collection(COLLECTION_ID, COLLECTION_TITLE)
    storage.add_user(USER_ID, PLATFORM_USER_ID)
    return storage


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def object_storage() -> InMemoryObjectStorage:
    return InMemoryObjectStorage()


@pytest.fixture
def file_storage(
    platform: FakePlatform,
    object_storage: InMemoryObjectStorage,
) -> FileStorageService:
    return FileStorageService(platform, object_storage)


@pytest.fixture
def scheduler() -> FlushScheduler:
    return FlushScheduler()


@pytest.fixture
def aggregator(
    storage: InMemoryStorage,
    file_storage: FileStorageService,
    scheduler: FlushScheduler,
) -> MediaGroupAggregator:
    return MediaGroupAggregator(storage, file_storage, scheduler, delay_seconds=TEST_GROUP_DELAY)


@pytest.fixture
def ingestion(
    storage: InMemoryStorage,
    file_storage: FileStorageService,
    aggregator: MediaGroupAggregator,
) -> IngestionService:
    return IngestionService(storage, file_storage, aggregator)


@pytest.fixture
def import_sessions(
    storage: InMemoryStorage,
    platform: FakePlatform,
    ingestion: IngestionService,
) -> ImportSessionService:
    return ImportSessionService(storage, platform, ingestion)


@pytest.fixture
def router(
    storage: InMemoryStorage,
    ingestion: IngestionService,
    import_sessions: ImportSessionService,
) -> UpdateRouter:
    return UpdateRouter(storage, ingestion, import_sessions)
