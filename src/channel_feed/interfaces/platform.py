"""Chat platform interface for channel_feed.

This module defines the Protocol for the outbound calls made to the chat
platform on behalf of a bot.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, runtime_checkable

__all__ = [
    "ChatPlatformInterface",
    "WebhookResult",
]


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of a webhook registration call."""

    ok: bool
    description: str | None = None


@runtime_checkable
class ChatPlatformInterface(Protocol):
    """Contract for chat platform calls.

    Every call takes the token of the bot it acts for, since one process
    serves many bots.
    """

    config_class: ClassVar[type | None] = None

    async def resolve_download_location(self, bot_token: str, file_id: str) -> str | None:
        """Resolve a file reference to a transient download URL.

        Args:
            bot_token: Bot API token
            file_id: Platform file reference

        Returns:
            Download URL, or None if the platform cannot serve the file
        """
        ...

    async def fetch_file(self, url: str) -> bytes | None:
        """Download raw bytes from a resolved location.

        Returns:
            File content, or None on a non-success response
        """
        ...

    async def send_message(
        self,
        bot_token: str,
        chat_id: int,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> bool:
        """Send an HTML-formatted message.

        Returns:
            True if the platform accepted the message
        """
        ...

    async def set_webhook(
        self,
        bot_token: str,
        url: str,
        allowed_updates: list[str],
        secret_token: str | None = None,
    ) -> WebhookResult:
        """Register the bot's webhook URL."""
        ...

    async def get_webhook_info(self, bot_token: str) -> dict[str, Any]:
        """Get the platform's view of the bot's webhook."""
        ...
