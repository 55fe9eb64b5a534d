"""Upload parsing utilities.

Responsibilities:
    - Image validation (size limit, supported formats by magic bytes)
    - MIME type detection independent of the client's declaration

Produces ImageAttachment values ready to be folded into a chat message.
"""

from src.parsing.image_parser import ImageParseError, parse_image

__all__ = ["ImageParseError", "parse_image"]
