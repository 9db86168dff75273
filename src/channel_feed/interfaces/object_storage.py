"""Object storage interface for channel_feed.

This module defines the Protocol for the binary media store.
"""

from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

__all__ = [
    "ObjectInfo",
    "ObjectStorageInterface",
]


@dataclass(frozen=True)
class ObjectInfo:
    """Metadata of a stored object."""

    size: int
    content_type: str


@runtime_checkable
class ObjectStorageInterface(Protocol):
    """Contract for object storage.

    Keys are opaque slash-separated paths. Serving stored objects to end
    users is outside this package.
    """

    config_class: ClassVar[type | None] = None

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store an object.

        Args:
            key: Object key
            data: Object bytes
            content_type: MIME type stored with the object

        Returns:
            The object key
        """
        ...

    async def get(self, key: str) -> bytes | None:
        """Read an object, None if it does not exist."""
        ...

    async def head(self, key: str) -> ObjectInfo | None:
        """Read object metadata, None if it does not exist."""
        ...
