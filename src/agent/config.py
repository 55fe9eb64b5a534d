"""Provider configuration with environment variable loading.

Pydantic-based configuration selecting which LLM backend serves the chat.
Supported hosts: a local Ollama server, OpenAI, Azure OpenAI, GitHub Models
and Azure AI Inference (the last two through the Azure AI Inference client).
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from src.errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()

AIHost = Literal["local", "openai", "azureopenai", "github", "azureinference"]


def _env(name: str) -> str | None:
    return os.getenv(name) or None


class AgentConfig(BaseModel):
    """Configuration for the chat provider.

    Attributes:
        ai_host: Backend to use (local, openai, azureopenai, github, azureinference).
        remote_model_id: Remote model or deployment identifier.
        openai_key: API key for OpenAI.
        azure_openai_endpoint: Azure OpenAI resource endpoint.
        azure_openai_deployment: Azure OpenAI deployment name.
        azure_openai_api_key: Azure OpenAI API key; Entra ID is used when unset.
        remote_endpoint: Azure AI Inference endpoint (also used for GitHub Models).
        github_token: Token for GitHub Models.
        azure_inference_key: Key for Azure AI Inference.
        local_model_name: Ollama model name.
        local_endpoint: Ollama server URL.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
    """

    ai_host: AIHost = Field(
        default_factory=lambda: os.getenv("AI_HOST", "local"),
        description="Which backend serves completions",
    )
    remote_model_id: str | None = Field(
        default_factory=lambda: _env("REMOTE_MODEL_OR_DEPLOYMENT_ID")
    )
    openai_key: str | None = Field(default_factory=lambda: _env("OPENAI_KEY"))
    azure_openai_endpoint: str | None = Field(default_factory=lambda: _env("AZURE_OPENAI_ENDPOINT"))
    azure_openai_deployment: str | None = Field(
        default_factory=lambda: _env("AZURE_OPENAI_DEPLOYMENT")
    )
    azure_openai_api_key: str | None = Field(default_factory=lambda: _env("AZURE_OPENAI_API_KEY"))
    remote_endpoint: str | None = Field(default_factory=lambda: _env("REMOTE_ENDPOINT"))
    github_token: str | None = Field(default_factory=lambda: _env("GITHUB_TOKEN"))
    azure_inference_key: str | None = Field(default_factory=lambda: _env("AZURE_INFERENCE_KEY"))
    local_model_name: str | None = Field(default_factory=lambda: _env("LOCAL_MODEL_NAME"))
    local_endpoint: str | None = Field(default_factory=lambda: _env("LOCAL_ENDPOINT"))
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("ai_host", mode="before")
    @classmethod
    def normalize_host(cls, v: object) -> object:
        """Accept host names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def validate_host_settings(self) -> "AgentConfig":
        """Check that every setting the chosen host needs is present."""
        for env_name, value in self._required_settings():
            if not value or not value.strip():
                raise ValueError(f"Missing configuration {env_name}")
        return self

    def _required_settings(self) -> list[tuple[str, str | None]]:
        if self.ai_host == "local":
            return [
                ("LOCAL_MODEL_NAME", self.local_model_name),
                ("LOCAL_ENDPOINT", self.local_endpoint),
            ]
        required = [("REMOTE_MODEL_OR_DEPLOYMENT_ID", self.remote_model_id)]
        if self.ai_host == "openai":
            required.append(("OPENAI_KEY", self.openai_key))
        elif self.ai_host == "azureopenai":
            required += [
                ("AZURE_OPENAI_ENDPOINT", self.azure_openai_endpoint),
                ("AZURE_OPENAI_DEPLOYMENT", self.azure_openai_deployment),
            ]
        else:
            required.append(("REMOTE_ENDPOINT", self.remote_endpoint))
            if self.ai_host == "github":
                required.append(("GITHUB_TOKEN", self.github_token))
            else:
                required.append(("AZURE_INFERENCE_KEY", self.azure_inference_key))
        return required

    @property
    def remote_key(self) -> str | None:
        """API key for the Azure AI Inference endpoint."""
        return self.github_token if self.ai_host == "github" else self.azure_inference_key


def get_agent_config() -> AgentConfig:
    """Create provider configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ConfigurationError: If a setting required by AI_HOST is missing or invalid.
    """
    try:
        return AgentConfig()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid provider configuration: {e}") from e
