"""Unit tests for individual components in isolation.

Coverage:
    - conversation/: History store, turn assembly, streaming loop, attachments
    - agent/: Provider configuration and agno translation (agno patched)
    - parsing/: Image upload validation
    - ui/: Chat page submit step

Leverages pytest-check for multiple assertions per test.
"""
