"""Image Chat - a streaming chat UI over a pluggable LLM backend.

Combines FastAPI for HTTP streaming, agno for provider access,
NiceGUI for the chat page, and Pydantic for data validation.

Components:
    - conversation: history store, turn assembly and streaming reply loop
    - agent: provider configuration and agno-backed completions
    - api: HTTP endpoints and streaming responses
    - parsing: image upload validation
    - ui: web interface for chat interactions
    - models: domain and request/response schemas
"""

__version__ = "0.1.0"
