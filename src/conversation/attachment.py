"""Image attachment dialog state.

Tracks the hand-off between "user asked to attach an image", "user picked
a file" and "user confirmed or cancelled". A confirmed attachment is folded
into the next user message exactly once.
"""

from enum import Enum

from src.errors import InvalidStateError
from src.models.schemas import ImageAttachment


class AttachmentState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    ATTACHED = "attached"


class ImageAttachmentFlow:
    """idle -> awaiting_confirmation -> (cancel -> idle | confirm -> attached)."""

    def __init__(self) -> None:
        self._state = AttachmentState.IDLE
        self._pending: ImageAttachment | None = None

    @property
    def state(self) -> AttachmentState:
        return self._state

    @property
    def pending(self) -> ImageAttachment | None:
        """The image picked or confirmed so far, if any."""
        return self._pending

    def request(self) -> None:
        """Open the dialog."""
        if self._state != AttachmentState.IDLE:
            raise InvalidStateError(f"Cannot request an attachment while {self._state.value}")
        self._state = AttachmentState.AWAITING_CONFIRMATION

    def select(self, attachment: ImageAttachment) -> None:
        """Record the picked file; replaces any earlier pick."""
        self._require(AttachmentState.AWAITING_CONFIRMATION)
        self._pending = attachment

    def confirm(self) -> ImageAttachment:
        self._require(AttachmentState.AWAITING_CONFIRMATION)
        if self._pending is None:
            raise InvalidStateError("No image selected")
        self._state = AttachmentState.ATTACHED
        return self._pending

    def cancel(self) -> None:
        """Discard the pending image and return to idle."""
        self._pending = None
        self._state = AttachmentState.IDLE

    def take(self) -> ImageAttachment | None:
        """Hand the confirmed image to the next message and reset.

        Returns None when nothing was attached.
        """
        if self._state != AttachmentState.ATTACHED:
            return None
        attachment = self._pending
        self._pending = None
        self._state = AttachmentState.IDLE
        return attachment

    def _require(self, state: AttachmentState) -> None:
        if self._state != state:
            raise InvalidStateError(f"Expected {state.value}, flow is {self._state.value}")
