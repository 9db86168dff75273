"""Media metadata extraction for channel_feed.

This module classifies the media item a message carries and flattens it
into a MediaMetadata record. It performs no I/O.
"""

from channel_feed.config import TELEGRAM_MAX_DOWNLOAD_BYTES
from channel_feed.messages import file_too_large
from channel_feed.models.media import MediaAttachment, MediaKind, MediaMetadata
from channel_feed.models.telegram import PhotoSize, TelegramMessage

__all__ = [
    "MEDIA_PRECEDENCE",
    "classify_attachment",
    "extract_media",
    "select_largest_photo",
]

# (message field, kind) in the order the first populated field wins.
MEDIA_PRECEDENCE: tuple[tuple[str, MediaKind], ...] = (
    ("photo", MediaKind.IMAGE),
    ("video", MediaKind.VIDEO),
    ("document", MediaKind.DOCUMENT),
    ("audio", MediaKind.AUDIO),
    ("animation", MediaKind.ANIMATION),
    ("voice", MediaKind.VOICE),
)

# Kinds whose size is checked against the download limit on arrival.
_SIZE_GATED = {
    MediaKind.VIDEO: "видео",
    MediaKind.DOCUMENT: "файл",
}


def select_largest_photo(variants: list[PhotoSize]) -> PhotoSize:
    """Pick the photo variant with the largest reported size.

    Missing sizes count as zero; ties resolve to the earliest variant.
    """
    best = variants[0]
    for variant in variants[1:]:
        if (variant.file_size or 0) > (best.file_size or 0):
            best = variant
    return best


def classify_attachment(message: TelegramMessage) -> MediaAttachment | None:
    """Classify the media item of a message.

    Only the first populated field in MEDIA_PRECEDENCE is used, even if the
    message carries several.

    Args:
        message: Inbound message

    Returns:
        Tagged attachment, or None if the message carries no media
    """
    for field_name, kind in MEDIA_PRECEDENCE:
        value = getattr(message, field_name)
        if not value:
            continue
        if kind is MediaKind.IMAGE:
            value = select_largest_photo(value)
        return MediaAttachment(kind=kind, payload=value)
    return None


def extract_media(
    message: TelegramMessage,
    max_download_bytes: int = TELEGRAM_MAX_DOWNLOAD_BYTES,
) -> MediaMetadata:
    """Extract the media metadata record of a message.

    Args:
        message: Inbound message
        max_download_bytes: Size limit for video and document retrieval

    Returns:
        MediaMetadata; all fields unset when the message has no media
    """
    attachment = classify_attachment(message)
    if attachment is None:
        return MediaMetadata()

    kind = attachment.kind
    item = attachment.payload
    fields: dict[str, object] = {
        "media_type": kind,
        "file_id": item.file_id,
        "file_size": item.file_size,
    }

    match kind:
        case MediaKind.IMAGE:
            fields.update(width=item.width, height=item.height)
        case MediaKind.VIDEO:
            fields.update(
                file_name="video",
                mime_type=item.mime_type,
                width=item.width,
                height=item.height,
                duration=item.duration,
                thumbnail_file_id=item.thumbnail.file_id if item.thumbnail else None,
            )
        case MediaKind.DOCUMENT:
            fields.update(file_name=item.file_name, mime_type=item.mime_type)
        case MediaKind.AUDIO:
            fields.update(
                file_name=item.file_name,
                mime_type=item.mime_type,
                duration=item.duration,
            )
        case MediaKind.ANIMATION:
            fields.update(
                mime_type=item.mime_type,
                width=item.width,
                height=item.height,
                duration=item.duration,
                thumbnail_file_id=item.thumbnail.file_id if item.thumbnail else None,
            )
        case MediaKind.VOICE:
            fields.update(
                file_name="voice_message",
                mime_type=item.mime_type,
                duration=item.duration,
            )

    file_size = item.file_size
    if kind in _SIZE_GATED and file_size and file_size > max_download_bytes:
        fields.update(
            file_id=None,
            thumbnail_file_id=None,
            has_error=True,
            error_message=file_too_large(file_size, _SIZE_GATED[kind]),
        )

    return MediaMetadata(**fields)
