"""Integration tests for the chat endpoints.

Runs the real FastAPI app through httpx ASGITransport with a scripted
provider injected via dependency overrides. Validates the SSE protocol,
history conversion and error mapping.
"""

import base64

from httpx import AsyncClient

from src.agent.provider import get_provider
from src.api import app
from src.errors import ConfigurationError
from src.models.schemas import ChatResponse, Role, StreamChunk, StreamStatus
from tests.fakes import PNG_BYTES, ScriptedProvider


def user(content: str, **extra: object) -> dict:
    return {"role": "user", "content": content, **extra}


def png_payload() -> dict:
    return {
        "filename": "photo.png",
        "mime_type": "image/png",
        "data": base64.b64encode(PNG_BYTES).decode("ascii"),
    }


async def read_chunks(client: AsyncClient, payload: dict) -> list[StreamChunk]:
    chunks: list[StreamChunk] = []
    async with client.stream("POST", "/chat/stream", json=payload) as response:
        assert response.status_code == 200
        async for line in response.aiter_lines():
            if line.startswith("data: "):
                chunks.append(StreamChunk.model_validate_json(line.removeprefix("data: ")))
    return chunks


class TestHealth:
    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.json() == {"status": "healthy", "service": "image-chat"}


class TestStreamingEndpoint:
    """Integration tests for POST /chat/stream SSE endpoint."""

    async def test_stream_returns_sse_content_type(self, async_client: AsyncClient) -> None:
        async with async_client.stream(
            "POST", "/chat/stream", json={"messages": [user("hi")]}
        ) as response:
            assert response.status_code == 200
            assert "text/event-stream" in response.headers["content-type"]

    async def test_chunks_carry_fragments_in_order(self, async_client: AsyncClient) -> None:
        """One generating chunk per fragment, then a done chunk."""
        chunks = await read_chunks(async_client, {"messages": [user("hi")]})

        assert [c.content for c in chunks[:-1]] == ["Hel", "lo", "!"]
        assert all(c.status == StreamStatus.GENERATING and not c.done for c in chunks[:-1])
        assert chunks[-1].done is True
        assert chunks[-1].status == StreamStatus.COMPLETE

    async def test_history_forwarded_with_system_prompt(
        self, async_client: AsyncClient, provider: ScriptedProvider
    ) -> None:
        payload = {
            "messages": [
                user("hello"),
                {"role": "assistant", "content": "Hi!"},
                user("what is this?", image=png_payload()),
            ]
        }

        await read_chunks(async_client, payload)

        turns = provider.calls[0]
        assert [t.role for t in turns] == [Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.USER]
        assert turns[0].text == "You are a helpful assistant."
        last = turns[-1]
        assert [p.type for p in last.parts] == ["text", "image"]
        assert last.images[0].data == PNG_BYTES

    async def test_provider_error_ends_stream_with_error_chunk(
        self, async_client: AsyncClient, provider: ScriptedProvider
    ) -> None:
        provider.fail_at = 1

        chunks = await read_chunks(async_client, {"messages": [user("hi")]})

        assert [c.content for c in chunks[:-1]] == ["Hel"]
        assert chunks[-1].done is True
        assert chunks[-1].status == StreamStatus.ERROR
        assert "interrupted" in chunks[-1].error

    async def test_empty_history_returns_422(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/chat/stream", json={"messages": []})

        assert response.status_code == 422

    async def test_empty_message_returns_422(self, async_client: AsyncClient) -> None:
        """Message with neither text nor image is rejected."""
        response = await async_client.post("/chat/stream", json={"messages": [user("   ")]})

        assert response.status_code == 422

    async def test_history_ending_with_assistant_returns_422(
        self, async_client: AsyncClient
    ) -> None:
        payload = {"messages": [user("hi"), {"role": "assistant", "content": "hello"}]}

        response = await async_client.post("/chat/stream", json=payload)

        assert response.status_code == 422

    async def test_invalid_image_returns_400(self, async_client: AsyncClient) -> None:
        image = {
            "filename": "doc.txt",
            "mime_type": "text/plain",
            "data": base64.b64encode(b"plain text").decode("ascii"),
        }

        response = await async_client.post(
            "/chat/stream", json={"messages": [user("look", image=image)]}
        )

        assert response.status_code == 400
        assert "Unsupported image" in response.json()["detail"]

    async def test_bad_base64_returns_400(self, async_client: AsyncClient) -> None:
        image = {"filename": "a.png", "mime_type": "image/png", "data": "not base64!"}

        response = await async_client.post(
            "/chat/stream", json={"messages": [user("look", image=image)]}
        )

        assert response.status_code == 400

    async def test_wrong_http_method_returns_405(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/chat/stream")

        assert response.status_code == 405


class TestChatEndpoint:
    """Integration tests for POST /chat."""

    async def test_returns_full_reply(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/chat", json={"messages": [user("hi")]})

        assert response.status_code == 200
        data = ChatResponse.model_validate(response.json())
        assert data.content == "Hello!"
        assert data.role == "assistant"

    async def test_image_only_message_accepted(
        self, async_client: AsyncClient, provider: ScriptedProvider
    ) -> None:
        payload = {"messages": [{"role": "user", "image": png_payload()}]}

        response = await async_client.post("/chat", json=payload)

        assert response.status_code == 200
        assert [p.type for p in provider.calls[0][-1].parts] == ["image"]

    async def test_provider_error_returns_502(
        self, async_client: AsyncClient, provider: ScriptedProvider
    ) -> None:
        provider.fail_at = 0

        response = await async_client.post("/chat", json={"messages": [user("hi")]})

        assert response.status_code == 502
        assert "completion failed" in response.json()["detail"]

    async def test_misconfigured_provider_returns_503(self, async_client: AsyncClient) -> None:
        def unavailable() -> ScriptedProvider:
            raise ConfigurationError("Missing configuration OPENAI_KEY")

        app.dependency_overrides[get_provider] = unavailable

        response = await async_client.post("/chat", json={"messages": [user("hi")]})

        assert response.status_code == 503
        assert "OPENAI_KEY" in response.json()["detail"]
