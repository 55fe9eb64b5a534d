"""NiceGUI chat interface with in-process streaming and image attachments."""

import asyncio
import logging

from nicegui import events, ui

from src.agent.provider import Provider, get_provider
from src.conversation.attachment import AttachmentState, ImageAttachmentFlow
from src.conversation.coordinator import StreamingReplyCoordinator
from src.conversation.store import ConversationStore, ReplyHandle
from src.errors import ChatError
from src.models.schemas import Message
from src.parsing.image_parser import ImageParseError, parse_image

logger = logging.getLogger(__name__)

GREETING = "Hi, I'm a helpful assistant, how may I assist you?"

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #0f766e 0%, #1d4ed8 100%); }

    .message-user {
        background: #1d4ed8;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .message-streaming { border: 1px dashed #0f766e; }

    .message-assistant pre { margin: 0.5rem 0; }
    .message-assistant code { font-family: 'Menlo', 'Monaco', monospace; }
</style>
"""

coordinator = StreamingReplyCoordinator()


def start_user_turn(
    store: ConversationStore, attachments: ImageAttachmentFlow, text: str
) -> Provider:
    """Append the user message, folding in the confirmed image.

    The provider is resolved before the image is taken: a configuration
    error leaves the attached image in place.

    Raises:
        ConfigurationError: If no provider can be created.
    """
    provider = get_provider()
    store.append(Message(text=text, image=attachments.take()))
    return provider


@ui.page("/")
def chat_page() -> None:
    """Main chat page. Each visit owns its own conversation."""
    ui.add_head_html(CUSTOM_CSS)
    store = ConversationStore(greeting=GREETING)
    attachments = ImageAttachmentFlow()
    live_replies: dict[str, ui.markdown] = {}
    reply_task: asyncio.Task[ReplyHandle] | None = None

    messages_container: ui.column
    input_field: ui.textarea
    attach_switch: ui.switch
    send_btn: ui.button
    stop_btn: ui.button
    upload_dialog: ui.dialog
    uploader: ui.upload
    preview: ui.image
    confirm_btn: ui.button

    def render_message(msg: Message) -> None:
        align = "justify-start" if msg.is_assistant else "justify-end"
        bubble = "message-assistant" if msg.is_assistant else "message-user"
        if msg.streaming:
            bubble += " message-streaming"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[70%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if msg.image is not None:
                        ui.image(msg.image.data_url).classes("w-48 rounded mb-2")
                    if msg.is_assistant:
                        body = ui.markdown(msg.text).classes("text-sm")
                        if msg.streaming:
                            live_replies[msg.id] = body
                    elif msg.text:
                        ui.label(msg.text).classes("text-sm whitespace-pre-wrap")
                ui.label(msg.created_at.strftime("%I:%M %p")).classes(
                    f"text-[10px] text-gray-400 {'self-start' if msg.is_assistant else 'self-end'}"
                )

    def refresh_messages() -> None:
        live_replies.clear()
        messages_container.clear()
        with messages_container:
            for msg in store:
                render_message(msg)

    def on_progress(handle: ReplyHandle) -> None:
        body = live_replies.get(handle.message_id)
        if body is None or not handle.streaming:
            refresh_messages()
        else:
            body.set_content(handle.text)

    def set_busy(busy: bool) -> None:
        send_btn.set_enabled(not busy)
        stop_btn.set_visibility(busy)

    def close_open_reply() -> None:
        """Finalize a reply left streaming by an error or a stop request."""
        handle = store.active_reply
        if handle is not None:
            store.finalize_assistant(handle)
        refresh_messages()

    def open_upload_dialog() -> None:
        attachments.request()
        uploader.reset()
        preview.set_visibility(False)
        confirm_btn.disable()
        upload_dialog.open()

    async def send_message() -> None:
        nonlocal reply_task
        if store.is_streaming:
            return

        text = (input_field.value or "").strip()
        if attach_switch.value and attachments.state == AttachmentState.IDLE:
            open_upload_dialog()
            return

        if not text and attachments.state != AttachmentState.ATTACHED:
            return

        try:
            provider = start_user_turn(store, attachments, text)
        except ChatError as e:
            logger.error(f"Provider unavailable: {e}")
            ui.notify(str(e), type="negative")
            return

        input_field.value = ""
        attach_switch.value = False
        set_busy(True)
        refresh_messages()

        reply_task = asyncio.create_task(coordinator.run(store, provider, on_progress))
        try:
            await asyncio.wait({reply_task})
            if reply_task.cancelled():
                close_open_reply()
                ui.notify("Reply stopped", type="warning")
            elif (error := reply_task.exception()) is not None:
                logger.error(f"Reply failed: {error}")
                close_open_reply()
                ui.notify(f"Reply failed: {error}", type="negative")
        finally:
            reply_task = None
            set_busy(False)

    def stop_reply() -> None:
        if reply_task is not None and not reply_task.done():
            reply_task.cancel()

    async def handle_upload(e: events.UploadEventArguments) -> None:
        content = await e.file.read()
        try:
            attachment = parse_image(e.file.name, content, e.file.content_type)
        except ImageParseError as err:
            logger.warning(f"Rejected upload {e.file.name}: {err}")
            ui.notify(str(err), type="negative")
            return

        attachments.select(attachment)
        preview.set_source(attachment.data_url)
        preview.set_visibility(True)
        confirm_btn.enable()

    async def confirm_image() -> None:
        attachments.confirm()
        upload_dialog.close()
        await send_message()

    def cancel_image() -> None:
        # Typed text stays in the input for a plain send
        attachments.cancel()
        attach_switch.value = False
        upload_dialog.close()

    # === Upload dialog ===
    with ui.dialog().props("persistent") as upload_dialog, ui.card().classes("w-96"):
        ui.label("Attach an image").classes("text-lg font-semibold")
        uploader = (
            ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1)
            .props('accept="image/*"')
            .classes("w-full")
        )
        preview = ui.image().classes("w-full rounded")
        preview.set_visibility(False)
        with ui.row().classes("w-full justify-end gap-2"):
            ui.button("Cancel", on_click=cancel_image).props("flat")
            confirm_btn = ui.button("Send", on_click=confirm_image)
            confirm_btn.disable()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        with ui.row().classes("w-full header px-5 py-4 items-center"):
            ui.icon("image_search").classes("text-white text-3xl")
            ui.label("Image Chat").classes("text-lg font-semibold text-white")

        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            input_field = (
                ui.textarea(placeholder="Type a message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            attach_switch = ui.switch("Image")
            stop_btn = ui.button(icon="stop", on_click=stop_reply).props("round flat")
            stop_btn.set_visibility(False)
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    refresh_messages()
