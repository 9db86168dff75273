"""HTTP surface of channel_feed."""

from channel_feed.api.app import create_app

__all__ = ["create_app"]
