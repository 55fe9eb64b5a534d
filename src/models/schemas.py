"""Pydantic models for the conversation domain and the HTTP API.

Models:
    - ImageAttachment: One uploaded image (filename, bytes, MIME type)
    - Message: One conversational turn as shown in the UI
    - Role, TextPart, ImagePart, Turn: Provider-neutral request turns
    - ChatMessage, ChatRequest, ChatResponse, StreamChunk: API payloads
"""

import base64
import binascii
import uuid
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ImageAttachment(BaseModel):
    """An image attached to a single message.

    Attributes:
        filename: Original filename as picked by the user.
        data: Raw image bytes.
        mime_type: Image type, e.g. image/jpeg.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    data: bytes = Field(repr=False)
    mime_type: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def data_url(self) -> str:
        """Base64 data URL suitable for an <img> source."""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


class Message(BaseModel):
    """A single chat message in the conversation.

    Frozen: the conversation store swaps in an updated copy when a streamed
    fragment arrives, so a message object never changes once handed out.

    Attributes:
        id: Unique identifier assigned at creation.
        is_assistant: True for assistant replies, False for user input.
        text: The message text.
        image: Optional image attachment (at most one).
        streaming: True only while the reply is being filled from a stream.
        synthetic: True for the seeded greeting, which is never sent upstream.
        created_at: Creation timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    is_assistant: bool = False
    text: str = ""
    image: ImageAttachment | None = None
    streaming: bool = False
    synthetic: bool = False
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def has_content(self) -> bool:
        return bool(self.text and self.text.strip()) or self.image is not None


class Role(str, Enum):
    """Speaker of a provider-neutral turn."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["image"] = "image"
    data: bytes = Field(repr=False)
    mime_type: str
    filename: str | None = None


class Turn(BaseModel):
    """One role-tagged unit of content sent to a provider.

    A turn may mix text and image parts; all parts share the turn's role.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: tuple[TextPart | ImagePart, ...] = ()

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    @property
    def images(self) -> list[ImagePart]:
        return [p for p in self.parts if isinstance(p, ImagePart)]


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ImagePayload(BaseModel):
    """Base64-encoded image carried inside an API chat message.

    Attributes:
        filename: Original filename.
        mime_type: Declared image type.
        data: Base64-encoded image bytes.
    """

    filename: str = Field(..., min_length=1)
    mime_type: str = Field(..., description="Declared MIME type, e.g. image/png")
    data: str = Field(..., min_length=1, description="Base64-encoded image bytes")

    def decode(self) -> bytes:
        """Decode the base64 payload.

        Raises:
            ValueError: If the payload is not valid base64.
        """
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image data: {e}") from e


class ChatMessage(BaseModel):
    """A single message of the history sent to the chat endpoints.

    Attributes:
        role: The speaker, 'user' or 'assistant'.
        content: The message text.
        image: Optional attached image.
    """

    role: Literal["user", "assistant"] = Field(..., description="Message role")
    content: str = Field("", description="The message content")
    image: ImagePayload | None = None

    @model_validator(mode="after")
    def require_content(self) -> "ChatMessage":
        """Reject messages with neither text nor an image."""
        if not self.content.strip() and self.image is None:
            raise ValueError("Message must carry text or an image")
        return self


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        messages: Full conversation history, oldest first; the last entry
            must be a user message.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)

    @field_validator("messages")
    @classmethod
    def last_message_from_user(cls, v: list[ChatMessage]) -> list[ChatMessage]:
        """Ensure the history ends with a user message."""
        if v and v[-1].role != "user":
            raise ValueError("The last message must come from the user")
        return v


class ChatResponse(BaseModel):
    """Non-streaming completion result.

    Attributes:
        content: The assistant's reply.
    """

    role: Literal["assistant"] = "assistant"
    content: str = Field(..., description="The assistant's response")


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text fragment carried by this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (generating, complete, error).
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None
