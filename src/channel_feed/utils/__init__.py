"""Utility functions for channel_feed.

This module contains internal utility functions.
"""

from channel_feed.utils.ids import generate_id, now_epoch, object_name

__all__ = [
    "generate_id",
    "now_epoch",
    "object_name",
]
