"""Chat completion endpoints.

Stateless: every request carries the full history, which is converted to
provider-neutral turns with the system instruction first.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from src.agent.provider import Provider, get_provider
from src.conversation.turns import build_turns
from src.errors import ProviderError
from src.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    ImageAttachment,
    Message,
    StreamChunk,
    StreamStatus,
    Turn,
)
from src.parsing.image_parser import ImageParseError, parse_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

ProviderDep = Annotated[Provider, Depends(get_provider)]


def _decode_image(message: ChatMessage) -> ImageAttachment | None:
    """Decode and validate the image carried by an API message.

    Raises:
        HTTPException: 400 if the image payload is invalid.
    """
    if message.image is None:
        return None

    try:
        content = message.image.decode()
        return parse_image(message.image.filename, content, message.image.mime_type)
    except (ValueError, ImageParseError) as e:
        logger.warning(f"Rejected image {message.image.filename}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e


def _build_request_turns(request: ChatRequest) -> list[Turn]:
    history = [
        Message(
            is_assistant=m.role == "assistant",
            text=m.content,
            image=_decode_image(m),
        )
        for m in request.messages
    ]
    return build_turns(history)


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


@router.post("", response_model=ChatResponse)
async def chat(request: ChatRequest, provider: ProviderDep) -> ChatResponse:
    """Complete a conversation in one response.

    Raises:
        400: Invalid image attachment.
        422: Malformed history.
        502: Provider failure.
    """
    turns = _build_request_turns(request)

    try:
        content = await provider.complete(turns)
    except ProviderError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    return ChatResponse(content=content)


@router.post("/stream")
async def chat_stream(request: ChatRequest, provider: ProviderDep) -> StreamingResponse:
    """Stream the reply as Server-Sent Events.

    Each event carries a StreamChunk. Content chunks have done=false; the
    stream ends with a done=true chunk whose status is complete or error.
    """
    turns = _build_request_turns(request)

    async def event_stream() -> AsyncGenerator[str]:
        try:
            async for fragment in provider.complete_streaming(turns):
                yield _sse(
                    StreamChunk(content=fragment, done=False, status=StreamStatus.GENERATING)
                )
        except ProviderError as e:
            yield _sse(
                StreamChunk(content="", done=True, status=StreamStatus.ERROR, error=str(e))
            )
            return

        yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
