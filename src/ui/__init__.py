"""NiceGUI interface - thin presentation layer for chat interactions.

Responsibilities:
    - Chat message display with live streaming updates
    - Image attachment dialog (pick, confirm or cancel)
    - One conversation per page visit, one reply in flight at a time

Delegates history and streaming to the conversation core.
"""
