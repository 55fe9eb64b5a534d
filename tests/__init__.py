"""Test package for Image Chat.

Structure:
    - unit/: Conversation core, configuration, provider translation, parsing
    - integration/: HTTP endpoints through the real FastAPI app
    - fakes.py: Scripted providers standing in for a live LLM

No test contacts a real model. Uses pytest-check for soft assertions.
"""
