"""Telegram Bot API infrastructure for channel_feed."""

from channel_feed.infra.telegram.client import TelegramBotClient

__all__ = ["TelegramBotClient"]
