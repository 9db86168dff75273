"""Service layer for channel_feed.

This module exports the main service entry points.
"""

from channel_feed.services.file_storage import (
    FileStorageService,
    RetrievalResult,
    StoredFile,
    guess_extension,
)
from channel_feed.services.import_session import ImportSessionService, parse_command
from channel_feed.services.ingestion import IngestionService, IngestOutcome
from channel_feed.services.media_extraction import classify_attachment, extract_media
from channel_feed.services.media_group import MediaGroupAggregator
from channel_feed.services.post_builder import PostBuilder
from channel_feed.services.router import UpdateRouter
from channel_feed.services.scheduler import FlushScheduler
from channel_feed.services.webhook_registration import (
    RegistrationResult,
    WebhookRegistrationService,
)

__all__ = [
    "FileStorageService",
    "FlushScheduler",
    "ImportSessionService",
    "IngestOutcome",
    "IngestionService",
    "MediaGroupAggregator",
    "PostBuilder",
    "RegistrationResult",
    "RetrievalResult",
    "StoredFile",
    "UpdateRouter",
    "WebhookRegistrationService",
    "classify_attachment",
    "extract_media",
    "guess_extension",
    "parse_command",
]
