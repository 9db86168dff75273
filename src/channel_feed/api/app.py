"""FastAPI application for channel_feed.

The webhook endpoint acknowledges every delivery immediately and hands the
payload to the orchestrator, which processes it in a detached task.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, FastAPI, HTTPException, Request

from channel_feed.infra.mongo.repositories import MongoStorageRepository
from channel_feed.infra.s3.client import S3ObjectStorage
from channel_feed.infra.telegram.client import TelegramBotClient
from channel_feed.logging import configure_logging, get_logger
from channel_feed.orchestrator import ChannelFeed

__all__ = [
    "SECRET_HEADER",
    "create_app",
    "router",
]

logger = get_logger(__name__)

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"

router = APIRouter()


def _feed(request: Request) -> ChannelFeed:
    return request.app.state.feed


@router.post("/webhook/{bot_id}")
async def telegram_webhook(bot_id: str, request: Request) -> dict[str, Any]:
    """Accept a webhook delivery for one bot."""
    feed = _feed(request)

    secret = feed.config.telegram.webhook_secret
    if secret is not None:
        header = request.headers.get(SECRET_HEADER)
        if header != secret.get_secret_value():
            logger.warning("webhook_unauthorized", bot_id=bot_id, has_header=bool(header))
            raise HTTPException(status_code=403, detail="forbidden")

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("webhook_body_not_json", bot_id=bot_id)
        return {"ok": True}

    feed.dispatch(bot_id, payload)
    return {"ok": True}


@router.get("/health")
async def health() -> dict[str, Any]:
    return {"ok": True, "ts": datetime.now(UTC).isoformat()}


def _default_feed() -> ChannelFeed:
    return ChannelFeed(
        storage_class=MongoStorageRepository,
        object_storage_class=S3ObjectStorage,
        platform_class=TelegramBotClient,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Connect the orchestrator owned by the app and register webhooks."""
    feed: ChannelFeed | None = app.state.feed
    if feed is not None:
        yield
        return

    feed = _default_feed()
    configure_logging(level=feed.config.log_level, json_output=feed.config.log_json)
    async with feed:
        app.state.feed = feed
        if feed.config.webhook_registration_enabled:
            await feed.register_webhooks()
        yield
    app.state.feed = None


def create_app(feed: ChannelFeed | None = None) -> FastAPI:
    """Create the webhook application.

    Args:
        feed: Connected orchestrator to serve; if None, the app builds the
            default one and manages its lifecycle

    Returns:
        FastAPI application
    """
    app = FastAPI(title="channel_feed", lifespan=lifespan)
    app.state.feed = feed
    app.include_router(router)
    return app
