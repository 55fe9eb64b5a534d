"""Conversation core: history, request assembly and the streaming reply loop.

Responsibilities:
    - Append-only message history with a single in-flight reply
    - Provider-neutral turn construction with the system instruction
    - Merging streamed fragments into one growing reply
    - Image attachment dialog state
"""

from src.conversation.attachment import AttachmentState, ImageAttachmentFlow
from src.conversation.coordinator import StreamingReplyCoordinator
from src.conversation.store import PLACEHOLDER_TEXT, ConversationStore, ReplyHandle
from src.conversation.turns import SYSTEM_PROMPT, build_turns, message_to_turn

__all__ = [
    "PLACEHOLDER_TEXT",
    "SYSTEM_PROMPT",
    "AttachmentState",
    "ConversationStore",
    "ImageAttachmentFlow",
    "ReplyHandle",
    "StreamingReplyCoordinator",
    "build_turns",
    "message_to_turn",
]
