"""Pytest fixtures and shared test configuration.

Fixtures:
    - provider: Scripted provider streaming "Hel", "lo", "!"
    - store: Empty conversation store
    - png_attachment: Minimal valid PNG attachment
    - async_client: HTTPX client for API testing with the provider injected
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from src.agent.provider import get_provider
from src.api import app
from src.conversation.store import ConversationStore
from src.models.schemas import ImageAttachment
from tests.fakes import PNG_BYTES, ScriptedProvider


@pytest.fixture
def provider() -> ScriptedProvider:
    """Provider replaying a three-fragment reply."""
    return ScriptedProvider(["Hel", "lo", "!"])


@pytest.fixture
def store() -> ConversationStore:
    """Fresh conversation without greeting."""
    return ConversationStore()


@pytest.fixture
def png_attachment() -> ImageAttachment:
    """Smallest attachment that passes PNG detection."""
    return ImageAttachment(filename="photo.png", data=PNG_BYTES, mime_type="image/png")


@pytest.fixture
async def async_client(provider: ScriptedProvider) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client with the scripted provider injected.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app.dependency_overrides[get_provider] = lambda: provider
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
