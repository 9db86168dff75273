"""Configuration management for channel_feed.

This module provides typed configuration classes using pydantic-settings.
Configuration is loaded from environment variables with optional .env file support.
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "MongoSettings",
    "S3Settings",
    "TelegramSettings",
    "ChannelFeedConfig",
    "TELEGRAM_MAX_DOWNLOAD_BYTES",
]

# Bot API refuses getFile downloads above this size.
TELEGRAM_MAX_DOWNLOAD_BYTES = 20 * 1024 * 1024


class MongoSettings(BaseSettings):
    """MongoDB connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHANNEL_FEED_MONGO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    uri: SecretStr = SecretStr("mongodb://localhost:27017")
    database: str = "channel_feed"
    collection_prefix: str = ""


class S3Settings(BaseSettings):
    """S3-compatible object storage settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHANNEL_FEED_S3_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    endpoint_url: str | None = None
    region: str = "us-east-1"
    access_key: str | None = None
    secret_key: SecretStr | None = None
    bucket: str = "channel-feed"
    addressing_style: str = "path"  # "path" or "virtual"


class TelegramSettings(BaseSettings):
    """Telegram Bot API settings."""

    model_config = SettingsConfigDict(
        env_prefix="CHANNEL_FEED_TELEGRAM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "https://api.telegram.org"
    request_timeout: float = 30.0
    webhook_secret: SecretStr | None = None
    public_base_url: str | None = None  # e.g. https://feed.example.com
    register_webhooks_on_startup: bool = False


class ChannelFeedConfig(BaseSettings):
    """Main configuration aggregating all settings.

    Example usage:
        config = ChannelFeedConfig()
        bucket = config.s3.bucket
    """

    model_config = SettingsConfigDict(
        env_prefix="CHANNEL_FEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Component settings (nested)
    mongo: MongoSettings = MongoSettings()
    s3: S3Settings = S3Settings()
    telegram: TelegramSettings = TelegramSettings()

    # Media group aggregation
    media_group_delay_seconds: float = 5.0
    buffer_ttl_seconds: int = 600

    # Retrieval limits
    max_download_bytes: int = TELEGRAM_MAX_DOWNLOAD_BYTES

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def webhook_registration_enabled(self) -> bool:
        """Check if webhooks should be registered when the app starts."""
        return (
            self.telegram.register_webhooks_on_startup
            and self.telegram.public_base_url is not None
        )
