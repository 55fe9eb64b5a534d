"""Pydantic models for the conversation domain and the HTTP API.

Models:
    - ImageAttachment: Uploaded image attached to a message
    - Message: One conversational turn held by the conversation store
    - Turn: Provider-neutral request turn with text and image parts
    - ChatRequest / ChatResponse / StreamChunk: HTTP payloads
"""

from src.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageAttachment,
    ImagePart,
    ImagePayload,
    Message,
    Role,
    StreamChunk,
    StreamStatus,
    TextPart,
    Turn,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "ImageAttachment",
    "ImagePart",
    "ImagePayload",
    "Message",
    "Role",
    "StreamChunk",
    "StreamStatus",
    "TextPart",
    "Turn",
]
