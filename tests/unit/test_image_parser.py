"""Unit tests for image upload validation."""

import pytest
import pytest_check as check

from src.errors import ChatError
from src.parsing.image_parser import (
    MAX_FILE_SIZE,
    ImageParseError,
    detect_mime_type,
    parse_image,
)
from tests.fakes import PNG_BYTES

JPEG_BYTES = bytes([0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46])
GIF_BYTES = b"GIF89a" + b"\x00" * 8
WEBP_BYTES = b"RIFF\x24\x00\x00\x00WEBPVP8 " + b"\x00" * 8


class TestDetectMimeType:
    """Tests for magic-byte detection."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            (PNG_BYTES, "image/png"),
            (JPEG_BYTES, "image/jpeg"),
            (GIF_BYTES, "image/gif"),
            (WEBP_BYTES, "image/webp"),
            (b"%PDF-1.4", None),
        ],
    )
    def test_detects_supported_formats(self, content: bytes, expected: str | None) -> None:
        assert detect_mime_type(content) == expected


class TestParseImageValid:
    """Tests for accepted uploads."""

    def test_returns_attachment(self) -> None:
        attachment = parse_image("cat.png", PNG_BYTES, "image/png")

        check.equal(attachment.filename, "cat.png")
        check.equal(attachment.data, PNG_BYTES)
        check.equal(attachment.mime_type, "image/png")
        check.equal(attachment.size, len(PNG_BYTES))

    def test_detected_type_wins_over_declared(self) -> None:
        """A JPEG uploaded as image/png is labelled image/jpeg."""
        attachment = parse_image("photo.png", JPEG_BYTES, "image/png")

        assert attachment.mime_type == "image/jpeg"

    def test_data_url(self) -> None:
        attachment = parse_image("cat.png", PNG_BYTES)

        assert attachment.data_url.startswith("data:image/png;base64,iVBORw0KGgo")


class TestParseImageRejection:
    """Tests for rejected uploads."""

    def test_rejects_empty_bytes(self) -> None:
        with pytest.raises(ImageParseError, match="Empty file"):
            parse_image("empty.png", b"")

    def test_rejects_non_image(self) -> None:
        with pytest.raises(ImageParseError, match="Unsupported image"):
            parse_image("doc.txt", b"This is a plain text file.", "text/plain")

    def test_rejects_oversized_file(self) -> None:
        oversized = PNG_BYTES + b"\x00" * MAX_FILE_SIZE

        with pytest.raises(ImageParseError, match="exceeds maximum"):
            parse_image("huge.png", oversized)

    def test_parse_error_is_chat_error(self) -> None:
        assert issubclass(ImageParseError, ChatError)
