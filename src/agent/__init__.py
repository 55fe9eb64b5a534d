"""LLM provider layer built on agno.

Responsibilities:
    - Provider configuration from environment variables
    - Backend selection (Ollama, OpenAI, Azure OpenAI, Azure AI Inference)
    - Translation of provider-neutral turns into agno messages
    - Streaming and non-streaming completions

The conversation core only sees the Provider interface.
"""

from src.agent.config import AgentConfig, get_agent_config
from src.agent.provider import AgnoProvider, Provider, get_provider

__all__ = ["AgentConfig", "AgnoProvider", "Provider", "get_agent_config", "get_provider"]
