"""Streaming reply loop: turns one user message into one assistant reply.

The coordinator builds the provider request from the conversation history,
opens a streaming completion and merges each fragment into a placeholder
reply held by the ConversationStore. A display callback observes every
intermediate state.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from contextlib import aclosing

from src.agent.provider import Provider
from src.conversation.store import ConversationStore, ReplyHandle
from src.conversation.turns import SYSTEM_PROMPT, build_turns
from src.errors import InvalidStateError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ReplyHandle], None | Awaitable[None]]


class StreamingReplyCoordinator:
    """Runs streaming completions against a conversation store.

    Holds no per-conversation state; one instance can serve any number of
    stores, one reply at a time per store.
    """

    def __init__(self, system_prompt: str = SYSTEM_PROMPT) -> None:
        self._system_prompt = system_prompt

    async def run(
        self,
        store: ConversationStore,
        provider: Provider,
        on_progress: ProgressCallback,
    ) -> ReplyHandle:
        """Stream the assistant reply to the last user message.

        Args:
            store: Conversation whose last entry is the user's message.
            provider: LLM capability to stream the reply from.
            on_progress: Called with the reply handle after every fragment
                and once more after finalization. May be a coroutine function.

        Returns:
            Handle of the finalized reply.

        Raises:
            InvalidStateError: If the history does not end with a user message.
            ProviderError: If the provider fails; the reply keeps its partial
                text and stays streaming.
        """
        history = store.current_history()
        _check_ready(history)

        turns = build_turns(history, self._system_prompt)
        stream = provider.complete_streaming(turns)
        handle = store.begin_assistant_placeholder()
        await _notify(on_progress, handle)

        # Closing the stream on exit releases the provider connection when
        # the consumer is cancelled or the provider raises.
        async with aclosing(stream) as fragments:
            async for fragment in fragments:
                store.append_chunk(handle, fragment)
                await _notify(on_progress, handle)

        store.finalize_assistant(handle)
        await _notify(on_progress, handle)
        logger.info(
            f"Reply {handle.message_id} complete: {handle.chunk_count} chunks, "
            f"{len(handle.text)} chars"
        )
        return handle


def _check_ready(history: tuple) -> None:
    if not history:
        raise InvalidStateError("Conversation is empty")
    last = history[-1]
    if last.is_assistant or last.streaming:
        raise InvalidStateError("Conversation must end with a user message")


async def _notify(on_progress: ProgressCallback, handle: ReplyHandle) -> None:
    result = on_progress(handle)
    if inspect.isawaitable(result):
        await result
