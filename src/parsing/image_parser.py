"""Image upload validation.

Checks uploaded bytes before they are attached to a chat message.
"""

import logging

from src.errors import ChatError
from src.models.schemas import ImageAttachment

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]

ACCEPTED_MIME_TYPES = frozenset(mime for _, mime in _SIGNATURES) | {"image/webp"}


class ImageParseError(ChatError):
    """Raised when an uploaded image is rejected."""

    pass


def detect_mime_type(content: bytes) -> str | None:
    """Identify the image type from its leading bytes.

    Returns:
        The MIME type, or None for unsupported formats.
    """
    for signature, mime_type in _SIGNATURES:
        if content.startswith(signature):
            return mime_type
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    return None


def parse_image(filename: str, content: bytes, mime_type: str | None = None) -> ImageAttachment:
    """Validate an uploaded image and wrap it as an attachment.

    Args:
        filename: Original filename.
        content: Raw bytes of the upload.
        mime_type: MIME type declared by the client, if any.

    Returns:
        ImageAttachment carrying the detected MIME type.

    Raises:
        ImageParseError: If the file is empty, too large, or not a supported image.
    """
    if not content:
        raise ImageParseError("Empty file provided")

    if len(content) > MAX_FILE_SIZE:
        size_mb = len(content) / (1024 * 1024)
        raise ImageParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    detected = detect_mime_type(content)
    if detected is None:
        raise ImageParseError("Unsupported image: expected PNG, JPEG, GIF or WEBP")

    if mime_type and mime_type != detected:
        logger.warning(f"Declared type {mime_type} for {filename} does not match {detected}")

    return ImageAttachment(filename=filename or "image", data=content, mime_type=detected)
