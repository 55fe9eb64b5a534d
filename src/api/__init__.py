"""FastAPI endpoints for the image chat.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time reply streaming.

Endpoints:
    - GET /health: Service health status
    - POST /chat: Non-streaming chat completion
    - POST /chat/stream: Streaming chat completion (SSE)
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
