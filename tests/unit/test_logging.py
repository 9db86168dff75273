"""Unit tests for logging helpers."""

import structlog

from channel_feed.logging import redact_bot_tokens, update_context


class TestRedactBotTokens:
    """Tests for the token redaction processor."""

    def test_token_in_url_is_masked(self) -> None:
        event = {
            "event": "telegram_get_file_failed",
            "error": "Server error for url 'https://api.telegram.org/bot123456:AA-b_c/getFile'",
        }

        result = redact_bot_tokens(None, "error", event)

        assert "123456:AA-b_c" not in result["error"]
        assert "https://api.telegram.org/bot<redacted>/getFile" in result["error"]

    def test_other_values_unchanged(self) -> None:
        event = {"event": "post_created", "collection_id": "c1", "count": 3}

        assert redact_bot_tokens(None, "info", dict(event)) == event


def test_update_context_binds_and_unbinds() -> None:
    with update_context("bot-1", 77):
        bound = structlog.contextvars.get_contextvars()
        assert bound["bot_id"] == "bot-1"
        assert bound["update_id"] == 77

    assert "bot_id" not in structlog.contextvars.get_contextvars()
