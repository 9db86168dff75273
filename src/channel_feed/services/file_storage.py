"""File retrieval and storage service for channel_feed.

This module downloads media referenced by platform file IDs and stores it
in object storage under a per-collection namespace.
"""

from dataclasses import dataclass

from channel_feed.interfaces.object_storage import ObjectStorageInterface
from channel_feed.interfaces.platform import ChatPlatformInterface
from channel_feed.logging import get_logger
from channel_feed.models.media import MediaKind, MediaMetadata
from channel_feed.utils.ids import object_name

__all__ = [
    "FileStorageService",
    "RetrievalResult",
    "StoredFile",
    "guess_extension",
    "mime_from_extension",
]

logger = get_logger(__name__)

MAX_EXTENSION_LENGTH = 5
DEFAULT_CONTENT_TYPE = "application/octet-stream"
THUMBNAIL_CONTENT_TYPE = "image/jpeg"

MIME_EXTENSIONS = {
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "application/pdf": "pdf",
}

EXTENSION_MIMES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mov": "video/quicktime",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "wav": "audio/wav",
    "pdf": "application/pdf",
}

KIND_EXTENSIONS = {
    MediaKind.IMAGE: "jpg",
    MediaKind.VIDEO: "mp4",
    MediaKind.AUDIO: "mp3",
    MediaKind.VOICE: "ogg",
    MediaKind.ANIMATION: "mp4",
    MediaKind.DOCUMENT: "bin",
}


def guess_extension(
    mime_type: str | None,
    file_name: str | None,
    kind: MediaKind | str | None,
) -> str:
    """Infer the storage extension of a file.

    Precedence: the file name's extension (at most 5 characters), then the
    MIME table, then the media kind default, then ``bin``.
    """
    if file_name and "." in file_name:
        ext = file_name.rsplit(".", 1)[1]
        if ext and len(ext) <= MAX_EXTENSION_LENGTH:
            return ext
    if mime_type and mime_type in MIME_EXTENSIONS:
        return MIME_EXTENSIONS[mime_type]
    if kind is not None and kind in KIND_EXTENSIONS:
        return KIND_EXTENSIONS[MediaKind(kind)]
    return "bin"


def mime_from_extension(extension: str) -> str:
    return EXTENSION_MIMES.get(extension.lower(), DEFAULT_CONTENT_TYPE)


@dataclass(frozen=True)
class StoredFile:
    """A file written to object storage."""

    storage_path: str
    mime_type: str
    file_size: int


@dataclass(frozen=True)
class RetrievalResult:
    """Outcome of retrieving one media item."""

    storage_path: str | None = None
    thumbnail_storage_path: str | None = None
    has_error: bool = False
    error_message: str | None = None


class FileStorageService:
    """Downloads platform files and stores them in object storage.

    Retrieval never raises: a failed lookup, download or upload yields None
    so that the owning item can be flagged while sibling items continue.

    Example:
        service = FileStorageService(platform, object_storage)
        stored = await service.store_file(token, file_id, collection_id,
                                          kind=MediaKind.VIDEO)
    """

    def __init__(
        self,
        platform: ChatPlatformInterface,
        object_storage: ObjectStorageInterface,
    ) -> None:
        """Initialize service with dependencies.

        Args:
            platform: Chat platform client for file lookup and download
            object_storage: Object store for the retrieved bytes
        """
        self._platform = platform
        self._object_storage = object_storage

    async def _download(self, bot_token: str, file_id: str) -> bytes | None:
        url = await self._platform.resolve_download_location(bot_token, file_id)
        if not url:
            logger.warning("file_location_unavailable", file_id=file_id)
            return None
        data = await self._platform.fetch_file(url)
        if data is None:
            logger.warning("file_download_failed", file_id=file_id)
        return data

    async def store_file(
        self,
        bot_token: str,
        file_id: str,
        collection_id: str,
        *,
        kind: MediaKind | str | None = None,
        mime_type: str | None = None,
        file_name: str | None = None,
    ) -> StoredFile | None:
        """Download a file and store it under the collection's namespace.

        Args:
            bot_token: Token of the bot that received the file
            file_id: Platform file reference
            collection_id: Owning collection
            kind: Media kind, used for the extension fallback
            mime_type: Declared MIME type
            file_name: Original file name

        Returns:
            StoredFile, or None if any step failed
        """
        try:
            data = await self._download(bot_token, file_id)
            if data is None:
                return None

            ext = guess_extension(mime_type, file_name, kind)
            content_type = mime_type or mime_from_extension(ext)
            key = f"{collection_id}/telegram/{object_name(ext)}"

            await self._object_storage.put(key, data, content_type)
            logger.info(
                "file_stored",
                storage_path=key,
                content_type=content_type,
                file_size=len(data),
            )
            return StoredFile(storage_path=key, mime_type=content_type, file_size=len(data))
        except Exception as e:
            logger.error("file_store_failed", file_id=file_id, error=str(e))
            return None

    async def store_thumbnail(
        self,
        bot_token: str,
        file_id: str,
        collection_id: str,
    ) -> str | None:
        """Download a thumbnail into the collection's thumbnail namespace.

        Best effort: any failure yields None.
        """
        try:
            data = await self._download(bot_token, file_id)
            if data is None:
                return None
            key = f"{collection_id}/thumbnails/{object_name('jpg')}"
            await self._object_storage.put(key, data, THUMBNAIL_CONTENT_TYPE)
            return key
        except Exception as e:
            logger.debug("thumbnail_store_failed", file_id=file_id, error=str(e))
            return None

    async def retrieve(
        self,
        media: MediaMetadata,
        bot_token: str,
        collection_id: str,
        failure_message: str,
    ) -> RetrievalResult:
        """Retrieve one media item for a post or group member.

        Items flagged on extraction are passed through untouched. A failed
        download flags the item with ``failure_message``; the thumbnail is
        fetched only when the item itself is retrievable.

        Args:
            media: Extracted metadata of the item
            bot_token: Token of the bot that received the item
            collection_id: Owning collection
            failure_message: Error recorded when the download fails

        Returns:
            RetrievalResult with storage keys or the error
        """
        if not media.is_retrievable:
            return RetrievalResult(has_error=media.has_error, error_message=media.error_message)

        assert media.file_id is not None
        stored = await self.store_file(
            bot_token,
            media.file_id,
            collection_id,
            kind=media.media_type,
            mime_type=media.mime_type,
            file_name=media.file_name,
        )

        thumbnail_path = None
        if media.thumbnail_file_id:
            thumbnail_path = await self.store_thumbnail(
                bot_token, media.thumbnail_file_id, collection_id
            )

        if stored is None:
            return RetrievalResult(
                thumbnail_storage_path=thumbnail_path,
                has_error=True,
                error_message=failure_message,
            )
        return RetrievalResult(
            storage_path=stored.storage_path,
            thumbnail_storage_path=thumbnail_path,
        )
