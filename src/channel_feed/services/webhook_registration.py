"""Webhook registration service for channel_feed."""

from dataclasses import dataclass

from channel_feed.interfaces.platform import ChatPlatformInterface
from channel_feed.interfaces.storage import StorageInterface
from channel_feed.logging import get_logger
from channel_feed.models.bot import WebhookStatus
from channel_feed.utils.ids import now_epoch

__all__ = [
    "ALLOWED_UPDATES",
    "RegistrationResult",
    "WebhookRegistrationService",
    "webhook_url",
]

logger = get_logger(__name__)

ALLOWED_UPDATES = ["message", "channel_post"]


def webhook_url(base_url: str, bot_id: str) -> str:
    return f"{base_url.rstrip('/')}/webhook/{bot_id}"


@dataclass
class RegistrationResult:
    """Outcome of registering one bot's webhook."""

    bot_id: str
    status: WebhookStatus
    url: str | None = None
    error: str | None = None


class WebhookRegistrationService:
    """Registers bot webhooks with the chat platform and records the outcome.

    Example:
        service = WebhookRegistrationService(storage, platform, secret_token)
        results = await service.register_all("https://feed.example.com")
    """

    def __init__(
        self,
        storage: StorageInterface,
        platform: ChatPlatformInterface,
        secret_token: str | None = None,
    ) -> None:
        """Initialize service with dependencies.

        Args:
            storage: Storage for bot configuration
            platform: Chat platform client
            secret_token: Shared secret the platform echoes on every delivery
        """
        self._storage = storage
        self._platform = platform
        self._secret_token = secret_token

    async def register(self, bot_id: str, base_url: str) -> RegistrationResult:
        """Register the webhook of one bot.

        Args:
            bot_id: Bot ID
            base_url: Public base URL of this service

        Returns:
            RegistrationResult
        """
        bot = await self._storage.get_bot(bot_id)
        if bot is None or not bot.token:
            logger.warning("webhook_bot_not_available", bot_id=bot_id)
            return RegistrationResult(
                bot_id=bot_id,
                status=WebhookStatus.FAILED,
                error="Bot not found or has no token",
            )

        url = webhook_url(base_url, bot_id)
        try:
            result = await self._platform.set_webhook(
                bot.token, url, ALLOWED_UPDATES, self._secret_token
            )
        except Exception as e:
            logger.error("webhook_registration_error", bot_id=bot_id, error=str(e))
            await self._storage.update_webhook_status(bot_id, WebhookStatus.FAILED, error=str(e))
            return RegistrationResult(
                bot_id=bot_id, status=WebhookStatus.FAILED, url=url, error=str(e)
            )

        if result.ok:
            await self._storage.update_webhook_status(
                bot_id, WebhookStatus.REGISTERED, registered_at=now_epoch()
            )
            logger.info("webhook_registered", bot_id=bot_id, url=url)
            return RegistrationResult(bot_id=bot_id, status=WebhookStatus.REGISTERED, url=url)

        error = result.description or "Unknown error"
        await self._storage.update_webhook_status(bot_id, WebhookStatus.FAILED, error=error)
        logger.warning("webhook_registration_failed", bot_id=bot_id, error=error)
        return RegistrationResult(
            bot_id=bot_id, status=WebhookStatus.FAILED, url=url, error=error
        )

    async def register_all(self, base_url: str) -> list[RegistrationResult]:
        """Register webhooks of every bot that has a token."""
        results = []
        for bot in await self._storage.list_bots():
            if not bot.token:
                continue
            results.append(await self.register(bot.id, base_url))

        logger.info(
            "webhooks_registered",
            total=len(results),
            registered=sum(r.status is WebhookStatus.REGISTERED for r in results),
        )
        return results
