"""Identifier utilities for channel_feed.

This module provides row identifiers, wall-clock timestamps and
collision-resistant object names for stored media.
"""

import secrets
import string
import time
import uuid

__all__ = [
    "generate_id",
    "now_epoch",
    "object_name",
]

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 6


def generate_id() -> str:
    """Generate a random row identifier.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def now_epoch() -> int:
    """Current time in epoch seconds."""
    return int(time.time())


def object_name(extension: str) -> str:
    """Generate a collision-resistant object file name.

    The name is the current time in milliseconds and a short random suffix,
    joined with the extension: ``1704067200123_k3v9qa.mp4``.

    Args:
        extension: File extension without the leading dot

    Returns:
        Object file name
    """
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{int(time.time() * 1000)}_{suffix}.{extension}"
