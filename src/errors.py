"""Exception hierarchy shared by the conversation core, providers and API."""


class ChatError(Exception):
    """Base class for all image-chat errors."""

    pass


class InvalidStateError(ChatError):
    """Raised when a conversation operation is not allowed in its current state.

    Examples: appending an empty message, mutating a finalized reply, or
    starting a second reply while one is still streaming.
    """

    pass


class ProviderError(ChatError):
    """Raised when the LLM provider call fails or its stream ends abnormally."""

    pass


class ConfigurationError(ChatError):
    """Raised when the provider cannot be configured from the environment."""

    pass
