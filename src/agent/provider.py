"""LLM provider capability and its agno-backed implementation.

The conversation core depends only on the Provider interface. AgnoProvider
selects a concrete agno model from AgentConfig once, at construction, and
translates provider-neutral turns into agno messages on every call.

Each call builds a fresh agno Agent without storage: the full history is
always passed explicitly, so no session state lives on the server side.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Sequence

from agno.agent import Agent
from agno.media import Image
from agno.models.azure import AzureAIFoundry, AzureOpenAI
from agno.models.base import Model
from agno.models.message import Message as AgnoMessage
from agno.models.ollama import Ollama
from agno.models.openai import OpenAIChat
from agno.run.agent import RunContentEvent, RunErrorEvent
from azure.identity import DefaultAzureCredential, get_bearer_token_provider

from src.agent.config import AgentConfig, get_agent_config
from src.errors import ProviderError
from src.models.schemas import ImagePart, Role, Turn

logger = logging.getLogger(__name__)

AZURE_COGNITIVE_SCOPE = "https://cognitiveservices.azure.com/.default"


class Provider(ABC):
    """A chat completion capability over provider-neutral turns."""

    @abstractmethod
    def complete_streaming(self, turns: Sequence[Turn]) -> AsyncGenerator[str]:
        """Stream the reply as text fragments, in arrival order.

        Fragments may be empty strings.

        Raises:
            ProviderError: If the call fails or the stream ends abnormally.
        """

    @abstractmethod
    async def complete(self, turns: Sequence[Turn]) -> str:
        """Return the full reply in one piece.

        Raises:
            ProviderError: If the call fails.
        """


def create_model(config: AgentConfig) -> Model:
    """Instantiate the agno model selected by config.ai_host."""
    if config.ai_host == "local":
        return Ollama(
            id=config.local_model_name,
            host=config.local_endpoint,
            options={"temperature": config.temperature, "num_predict": config.max_tokens},
        )

    if config.ai_host == "azureopenai":
        # Without an API key, sign in with Entra ID
        if config.azure_openai_api_key:
            credentials: dict[str, object] = {"api_key": config.azure_openai_api_key}
        else:
            credentials = {
                "azure_ad_token_provider": get_bearer_token_provider(
                    DefaultAzureCredential(), AZURE_COGNITIVE_SCOPE
                )
            }
        return AzureOpenAI(
            id=config.remote_model_id,
            azure_endpoint=config.azure_openai_endpoint,
            azure_deployment=config.azure_openai_deployment,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            **credentials,
        )

    if config.ai_host == "openai":
        return OpenAIChat(
            id=config.remote_model_id,
            api_key=config.openai_key,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    # Azure AI Inference also serves GitHub Models
    return AzureAIFoundry(
        id=config.remote_model_id,
        api_key=config.remote_key,
        azure_endpoint=config.remote_endpoint,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
    )


def _to_agno_image(part: ImagePart) -> Image:
    image_format = part.mime_type.split("/")[-1] if "/" in part.mime_type else None
    return Image(content=part.data, format=image_format)


def to_agno_messages(turns: Sequence[Turn]) -> tuple[str | None, list[AgnoMessage]]:
    """Split turns into a system prompt and agno conversation messages.

    Returns:
        The joined system instruction (or None) and the user/assistant
        messages in order, with images attached to their own message.
    """
    system_parts = [t.text for t in turns if t.role == Role.SYSTEM]
    messages = [
        AgnoMessage(
            role=turn.role.value,
            content=turn.text,
            images=[_to_agno_image(p) for p in turn.images] or None,
        )
        for turn in turns
        if turn.role != Role.SYSTEM
    ]
    system_message = "\n\n".join(system_parts) if system_parts else None
    return system_message, messages


class AgnoProvider(Provider):
    """Provider backed by an agno model.

    Wraps agno with:
    - Model selection from configuration (Ollama, OpenAI, Azure OpenAI,
      Azure AI Inference)
    - Stateless runs with explicit history
    - Content-only streaming interface
    - SDK errors mapped to ProviderError
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the provider.

        Args:
            config: Optional provider configuration.
                    Loads from environment if not provided.

        Raises:
            ConfigurationError: If the environment configuration is invalid.
        """
        self._config = config or get_agent_config()
        self._model = create_model(self._config)
        logger.info(f"Initialized {self._config.ai_host} provider ({self._model.id})")

    def _create_agent(self, system_message: str | None) -> Agent:
        return Agent(
            model=self._model,
            system_message=system_message,
            telemetry=False,
        )

    async def complete_streaming(self, turns: Sequence[Turn]) -> AsyncGenerator[str]:
        """Stream reply fragments for the given turns.

        Yields:
            Content deltas as they arrive; empty deltas are passed through.
        """
        system_message, messages = to_agno_messages(turns)
        agent = self._create_agent(system_message)

        try:
            async for event in agent.arun(messages, stream=True):
                if isinstance(event, RunErrorEvent):
                    raise ProviderError(event.content or "Provider run failed")
                if isinstance(event, RunContentEvent):
                    content = event.content
                    yield content if isinstance(content, str) else str(content or "")
        except ProviderError as e:
            logger.error(f"Streaming completion failed: {e}")
            raise
        except Exception as e:
            logger.error(f"Streaming completion failed: {e}")
            raise ProviderError(f"Streaming completion failed: {e}") from e

    async def complete(self, turns: Sequence[Turn]) -> str:
        """Get the complete reply for the given turns."""
        system_message, messages = to_agno_messages(turns)
        agent = self._create_agent(system_message)

        try:
            response = await agent.arun(messages)
        except Exception as e:
            logger.error(f"Completion failed: {e}")
            raise ProviderError(f"Completion failed: {e}") from e

        content = response.content
        return content if isinstance(content, str) else str(content or "")


# Module-level singleton instance
_provider: Provider | None = None


def get_provider() -> Provider:
    """Get or create the global provider.

    Resolved once at startup from the environment.

    Returns:
        The configured Provider instance.

    Raises:
        ConfigurationError: If the environment configuration is invalid.
    """
    global _provider
    if _provider is None:
        _provider = AgnoProvider()
    return _provider
