"""Integration tests for the HTTP API working as a system.

Requests go through the real FastAPI app via httpx ASGITransport; only the
LLM provider is replaced by a scripted fake.
"""
