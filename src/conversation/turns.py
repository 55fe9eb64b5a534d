"""Conversion from chat history to provider-neutral turns."""

from collections.abc import Iterable

from src.models.schemas import ImagePart, Message, Role, TextPart, Turn

SYSTEM_PROMPT = "You are a helpful assistant."


def message_to_turn(message: Message) -> Turn:
    """Map a UI message to a provider-neutral turn.

    Text comes first, followed by the image when one is attached. Both
    parts share the message's role.
    """
    parts: list[TextPart | ImagePart] = []
    if message.text:
        parts.append(TextPart(text=message.text))
    if message.image is not None:
        parts.append(
            ImagePart(
                data=message.image.data,
                mime_type=message.image.mime_type,
                filename=message.image.filename,
            )
        )
    return Turn(role=Role.ASSISTANT if message.is_assistant else Role.USER, parts=tuple(parts))


def build_turns(history: Iterable[Message], system_prompt: str = SYSTEM_PROMPT) -> list[Turn]:
    """Rebuild the outgoing request from the conversation history.

    The system instruction is placed ahead of the history. Synthetic
    messages (the seeded greeting) are display-only and skipped.
    """
    turns = [Turn(role=Role.SYSTEM, parts=(TextPart(text=system_prompt),))]
    turns.extend(message_to_turn(m) for m in history if not m.synthetic)
    return turns
