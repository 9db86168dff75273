#!/usr/bin/env python
"""Register the webhooks of all configured bots.

This script connects to the configured MongoDB and Bot API, calls setWebhook
for every bot that has a token, and prints what the platform reports back.

Usage:
    python scripts/register_webhooks.py [BASE_URL]

Environment variables (via .env):
    CHANNEL_FEED_MONGO_URI=mongodb://localhost:27017
    CHANNEL_FEED_MONGO_DATABASE=channel_feed
    CHANNEL_FEED_TELEGRAM_PUBLIC_BASE_URL=https://feed.example.com
    CHANNEL_FEED_TELEGRAM_WEBHOOK_SECRET=your_secret
"""

import asyncio
import logging
import sys

from channel_feed import ChannelFeed, MongoStorageRepository, S3ObjectStorage, TelegramBotClient
from channel_feed.config import ChannelFeedConfig
from channel_feed.logging import configure_logging
from channel_feed.models.bot import WebhookStatus

configure_logging(level=logging.INFO)


async def main() -> None:
    """Main entry point."""
    config = ChannelFeedConfig()
    base_url = sys.argv[1] if len(sys.argv) > 1 else config.telegram.public_base_url

    if not base_url:
        print("ERROR: CHANNEL_FEED_TELEGRAM_PUBLIC_BASE_URL not set and no BASE_URL given")
        sys.exit(1)

    async with ChannelFeed(
        storage_class=MongoStorageRepository,
        object_storage_class=S3ObjectStorage,
        platform_class=TelegramBotClient,
        config=config,
    ) as feed:
        results = await feed.register_webhooks(base_url)

        print("\n" + "=" * 60)
        print(f"Registered webhooks under {base_url}")
        print("=" * 60)

        for result in results:
            if result.status is WebhookStatus.REGISTERED:
                info = await feed.get_webhook_info(result.bot_id)
                pending = info.get("pending_update_count", 0)
                print(f"  OK      {result.bot_id}: {result.url} (pending: {pending})")
            else:
                print(f"  FAILED  {result.bot_id}: {result.error}")

    failed = sum(r.status is not WebhookStatus.REGISTERED for r in results)
    if failed:
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
