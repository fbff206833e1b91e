"""NiceGUI chat interface for the finance assistant."""

import os

from nicegui import events, ui

from finaibot.models.schemas import ConversationTurn, Role
from finaibot.parsing.attachments import UploadedFile
from finaibot.ui.consumer import StreamConsumer

WELCOME_MESSAGE = "Hi I am FinAIBot🤖, How Can I Help you Today?"

SUGGESTIONS = [
    "How do I create a monthly budget?",
    "What are the best investment options for beginners?",
    "Explain the concept of compound interest",
    "Tips for reducing monthly expenses",
    "How to start saving for retirement?",
]

CUSTOM_CSS = """
<style>
    body { background: #f3f4f6; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 16px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: linear-gradient(135deg, #059669 0%, #0d9488 100%); }

    .message-user {
        background: #059669;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .typing-dot {
        width: 8px; height: 8px;
        background: #059669;
        border-radius: 50%;
        animation: bounce 1.4s infinite ease-in-out;
    }
    .typing-dot:nth-child(2) { animation-delay: 0.2s; }
    .typing-dot:nth-child(3) { animation-delay: 0.4s; }

    @keyframes bounce {
        0%, 60%, 100% { transform: translateY(0); }
        30% { transform: translateY(-6px); }
    }
</style>
"""


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)

    pending_files: list[UploadedFile] = []
    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button
    upload: ui.upload
    live_reply: ui.markdown | None = None
    typing_row: ui.row | None = None
    rendered_turns = 0

    def render_attachments(turn: ConversationTurn) -> None:
        with ui.row().classes("gap-2 mt-2"):
            for ref in turn.attachments:
                if ref.mime_type.startswith("image/") and ref.url:
                    ui.image(ref.url).classes("w-24 h-24 rounded")
                else:
                    ui.chip(ref.name, icon="attach_file").props("dense outline color=white")

    def render_turn(turn: ConversationTurn, live: bool) -> None:
        nonlocal live_reply, typing_row
        is_user = turn.role == Role.USER
        align = "justify-end" if is_user else "justify-start"
        bubble = "message-user" if is_user else "message-assistant"

        with ui.row().classes(f"w-full {align}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                with ui.element("div").classes(f"px-4 py-3 {bubble}"):
                    if is_user:
                        ui.label(turn.content).classes("text-sm whitespace-pre-wrap")
                        if turn.attachments:
                            render_attachments(turn)
                    else:
                        if live and not turn.content:
                            with ui.row().classes("gap-1 py-1") as typing_row:
                                for _ in range(3):
                                    ui.element("div").classes("typing-dot")
                        reply = ui.markdown(turn.content).classes("text-sm")
                        if live:
                            live_reply = reply
                ui.label(turn.created_at.astimezone().strftime("%I:%M %p")).classes(
                    f"text-[10px] text-gray-400 {'self-end' if is_user else 'self-start'}"
                )

    def render_welcome() -> None:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("px-4 py-3 message-assistant"):
                ui.label(WELCOME_MESSAGE).classes("text-sm")
        with ui.row().classes("w-full gap-2 flex-wrap"):
            for suggestion in SUGGESTIONS:
                ui.button(
                    suggestion, on_click=lambda s=suggestion: send_message(s)
                ).props("outline rounded no-caps size=sm color=teal")

    def refresh_messages() -> None:
        nonlocal live_reply, typing_row, rendered_turns
        live_reply = None
        typing_row = None
        rendered_turns = len(consumer.transcript)
        messages_container.clear()
        with messages_container:
            if not consumer.transcript:
                render_welcome()
                return
            last_index = len(consumer.transcript) - 1
            for index, turn in enumerate(consumer.transcript):
                live = consumer.is_streaming and index == last_index
                render_turn(turn, live)

    def on_change() -> None:
        if len(consumer.transcript) != rendered_turns or live_reply is None:
            refresh_messages()
            return
        turn = consumer.transcript[-1]
        if consumer.is_streaming:
            if typing_row is not None and turn.content:
                typing_row.set_visibility(False)
            live_reply.set_content(turn.content)
        else:
            refresh_messages()

    consumer = StreamConsumer(on_change=on_change)

    async def handle_upload(e: events.UploadEventArguments) -> None:
        pending_files.append(
            UploadedFile(
                name=e.file.name,
                mime_type=e.file.content_type or "application/octet-stream",
                content=await e.file.read(),
            )
        )
        ui.notify(f"Attached {e.file.name}")

    async def send_message(text: str | None = None) -> None:
        text = input_field.value if text is None else text
        if consumer.is_streaming or (not text.strip() and not pending_files):
            return

        files = list(pending_files)
        pending_files.clear()
        upload.reset()
        input_field.value = ""
        send_btn.disable()
        try:
            await consumer.submit(text, files)
        finally:
            send_btn.enable()

    def new_chat() -> None:
        pending_files.clear()
        consumer.reset()

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-4xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        # Header
        with ui.row().classes("w-full header px-5 py-4 items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("savings").classes("text-white text-3xl")
                ui.label("FinAIBot").classes("text-lg font-semibold text-white")
            ui.button(icon="add", on_click=new_chat).props("flat round color=white")

        # Messages
        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5"),
        ):
            messages_container = ui.column().classes("w-full gap-4")

        # Input
        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            upload = (
                ui.upload(on_upload=handle_upload, multiple=True, auto_upload=True)
                .props("flat dense accept=.csv,.json,.txt,.md,.pdf,image/*")
                .classes("w-48")
            )
            input_field = (
                ui.textarea(placeholder="Ask about budgeting, saving, investing...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", lambda: send_message())
            )
            send_btn = ui.button(icon="send", on_click=lambda: send_message()).props(
                "round unelevated color=teal"
            )

    refresh_messages()


def main() -> None:
    """Serve the chat page on its own, streaming from the relay at API_BASE_URL."""
    ui.run(title="FinAIBot", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ == "__main__":
    main()
