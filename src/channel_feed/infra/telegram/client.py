"""Telegram Bot API client for channel_feed.

This module provides the ChatPlatformInterface implementation over the
Bot API's HTTP interface using httpx.
"""

from typing import Any, Self

import httpx

from channel_feed.config import TelegramSettings
from channel_feed.interfaces.platform import ChatPlatformInterface, WebhookResult
from channel_feed.logging import get_logger

__all__ = [
    "TelegramBotClient",
]

logger = get_logger(__name__)


class TelegramBotClient(ChatPlatformInterface):
    """Bot API client shared by all bots of the process.

    Errors never propagate from file and message calls: they are logged and
    reported as None or False so that callers can flag the affected item.

    Example:
        client = await TelegramBotClient.from_config(TelegramSettings())
        url = await client.resolve_download_location(token, file_id)
        data = await client.fetch_file(url)
    """

    config_class = TelegramSettings

    def __init__(
        self,
        api_base_url: str = "https://api.telegram.org",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_base_url: Bot API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used in tests)
        """
        self._api_base_url = api_base_url.rstrip("/")
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    async def from_config(cls, config: TelegramSettings) -> Self:
        """Factory method for ChannelFeed instantiation."""
        return cls(api_base_url=config.api_base_url, timeout=config.request_timeout)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict."""
        return await cls.from_config(TelegramSettings(**config))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._http.aclose()

    def _method_url(self, bot_token: str, method: str) -> str:
        return f"{self._api_base_url}/bot{bot_token}/{method}"

    async def _call(self, bot_token: str, method: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Call a Bot API method and return the decoded envelope."""
        response = await self._http.post(self._method_url(bot_token, method), json=payload)
        return response.json()

    async def resolve_download_location(self, bot_token: str, file_id: str) -> str | None:
        """Resolve a file reference through getFile."""
        try:
            data = await self._call(bot_token, "getFile", {"file_id": file_id})
        except (httpx.HTTPError, ValueError) as e:
            logger.error("telegram_get_file_failed", file_id=file_id, error=str(e))
            return None

        file_path = (data.get("result") or {}).get("file_path")
        if not data.get("ok") or not file_path:
            logger.warning(
                "telegram_get_file_rejected",
                file_id=file_id,
                description=data.get("description"),
            )
            return None
        return f"{self._api_base_url}/file/bot{bot_token}/{file_path}"

    async def fetch_file(self, url: str) -> bytes | None:
        """Download file bytes."""
        try:
            response = await self._http.get(url)
        except httpx.HTTPError as e:
            logger.error("telegram_file_download_failed", error=str(e))
            return None
        if response.status_code != httpx.codes.OK:
            logger.warning("telegram_file_download_status", status_code=response.status_code)
            return None
        return response.content

    async def send_message(
        self,
        bot_token: str,
        chat_id: int,
        text: str,
        reply_markup: dict[str, Any] | None = None,
    ) -> bool:
        """Send an HTML-formatted message."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        try:
            data = await self._call(bot_token, "sendMessage", payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("telegram_send_message_failed", chat_id=chat_id, error=str(e))
            return False
        if not data.get("ok"):
            logger.warning(
                "telegram_send_message_rejected",
                chat_id=chat_id,
                description=data.get("description"),
            )
            return False
        return True

    async def set_webhook(
        self,
        bot_token: str,
        url: str,
        allowed_updates: list[str],
        secret_token: str | None = None,
    ) -> WebhookResult:
        """Register the bot's webhook URL."""
        payload: dict[str, Any] = {
            "url": url,
            "allowed_updates": allowed_updates,
            "drop_pending_updates": False,
        }
        if secret_token:
            payload["secret_token"] = secret_token
        data = await self._call(bot_token, "setWebhook", payload)
        return WebhookResult(ok=bool(data.get("ok")), description=data.get("description"))

    async def get_webhook_info(self, bot_token: str) -> dict[str, Any]:
        """Get the platform's view of the bot's webhook."""
        response = await self._http.get(self._method_url(bot_token, "getWebhookInfo"))
        data = response.json()
        return data.get("result") or {}
