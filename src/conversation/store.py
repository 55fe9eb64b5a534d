"""Append-only conversation history for a single chat session."""

import logging
from collections.abc import Iterator

from src.errors import InvalidStateError
from src.models.schemas import Message

logger = logging.getLogger(__name__)

# Shown in the placeholder until the first fragment arrives
PLACEHOLDER_TEXT = "..."


class ReplyHandle:
    """Read-only view of an assistant reply being filled from a stream.

    Returned by ConversationStore.begin_assistant_placeholder(). The reply
    can only be changed through the store's append_chunk() and
    finalize_assistant().
    """

    def __init__(self, store: "ConversationStore", index: int, message_id: str) -> None:
        self._store = store
        self._index = index
        self._message_id = message_id
        self._chunk_count = 0

    @property
    def message_id(self) -> str:
        return self._message_id

    @property
    def message(self) -> Message:
        """Current snapshot of the reply message."""
        return self._store._messages[self._index]

    @property
    def text(self) -> str:
        return self.message.text

    @property
    def streaming(self) -> bool:
        return self.message.streaming

    @property
    def chunk_count(self) -> int:
        """Number of fragments merged so far."""
        return self._chunk_count

    def __repr__(self) -> str:
        return (
            f"ReplyHandle(message_id={self._message_id!r}, "
            f"chunks={self._chunk_count}, streaming={self.streaming})"
        )


class ConversationStore:
    """Ordered message history owned by one session.

    Messages are only ever appended. At most one assistant reply may be
    streaming at a time; while it is, no other message can be appended.
    """

    def __init__(self, greeting: str | None = None) -> None:
        """Create an empty conversation.

        Args:
            greeting: Optional assistant greeting shown first. It is marked
                synthetic and never sent to a provider.
        """
        self._messages: list[Message] = []
        self._active: ReplyHandle | None = None
        if greeting:
            self._messages.append(Message(is_assistant=True, text=greeting, synthetic=True))

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    @property
    def is_streaming(self) -> bool:
        return self._active is not None

    @property
    def active_reply(self) -> ReplyHandle | None:
        """Handle of the reply currently streaming, if any."""
        return self._active

    def current_history(self) -> tuple[Message, ...]:
        """Return the full history in chronological order."""
        return tuple(self._messages)

    def append(self, message: Message) -> Message:
        """Add a message to the end of the conversation.

        Raises:
            InvalidStateError: If the message has neither text nor an image,
                or a reply is still streaming.
        """
        if not message.has_content:
            raise InvalidStateError("Message must carry text or an image")
        if message.streaming:
            raise InvalidStateError("Use begin_assistant_placeholder() for streaming replies")
        self._ensure_idle()
        self._messages.append(message)
        logger.debug(f"Appended message {message.id} (assistant={message.is_assistant})")
        return message

    def begin_assistant_placeholder(self) -> ReplyHandle:
        """Append an empty streaming assistant reply and return its handle.

        Raises:
            InvalidStateError: If another reply is still streaming.
        """
        self._ensure_idle()
        message = Message(is_assistant=True, text=PLACEHOLDER_TEXT, streaming=True)
        self._messages.append(message)
        handle = ReplyHandle(self, len(self._messages) - 1, message.id)
        self._active = handle
        return handle

    def append_chunk(self, handle: ReplyHandle, fragment: str) -> Message:
        """Merge one streamed fragment into the reply.

        The first fragment replaces the placeholder text; later fragments
        are concatenated. Empty fragments are accepted.

        Raises:
            InvalidStateError: If the reply was already finalized.
        """
        current = self._require_active(handle)
        text = fragment if handle._chunk_count == 0 else current.text + fragment
        updated = current.model_copy(update={"text": text})
        self._messages[handle._index] = updated
        handle._chunk_count += 1
        return updated

    def finalize_assistant(self, handle: ReplyHandle) -> Message:
        """Mark the reply complete; its text is fixed from now on.

        Raises:
            InvalidStateError: If the reply was already finalized.
        """
        current = self._require_active(handle)
        updated = current.model_copy(update={"streaming": False})
        self._messages[handle._index] = updated
        self._active = None
        logger.debug(f"Finalized reply {handle.message_id} after {handle.chunk_count} chunks")
        return updated

    def _ensure_idle(self) -> None:
        if self._active is not None:
            raise InvalidStateError(
                f"Reply {self._active.message_id} is still streaming"
            )

    def _require_active(self, handle: ReplyHandle) -> Message:
        if handle._store is not self:
            raise InvalidStateError("Handle belongs to a different conversation")
        if self._active is not handle:
            raise InvalidStateError(f"Reply {handle.message_id} is already finalized")
        return self._messages[handle._index]
