"""NiceGUI chat page consuming the relay's SSE stream."""

import os

from nicegui import ui

from jetson_relay.ui.relay_client import ChatTranscript, stream_relay_response

BOT_NAME = "Jetson"
ERROR_REPLY = "Sorry, I encountered an error. Please try again."


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    transcript = ChatTranscript()
    is_streaming = False

    messages_container: ui.column
    input_field: ui.textarea
    send_btn: ui.button

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for msg in transcript.messages:
                is_user = msg["role"] == "user"
                ui.chat_message(
                    msg["text"],
                    name="You" if is_user else BOT_NAME,
                    sent=is_user,
                )

    async def send_message() -> None:
        nonlocal is_streaming
        text = input_field.value.strip()
        if not text or is_streaming:
            return

        input_field.value = ""
        is_streaming = True
        send_btn.disable()

        transcript.add_user_message(text)
        history = transcript.history()
        refresh_messages()
        transcript.start_bot_message()

        with messages_container, ui.chat_message(name=BOT_NAME, sent=False):
            response_label = ui.label("")

        def on_chunk(fragment: str) -> None:
            transcript.append_to_bot_message(fragment)
            response_label.set_text(transcript.messages[-1]["text"])

        def on_error(error: str) -> None:
            transcript.replace_bot_message(ERROR_REPLY)
            ui.notify(error, type="negative")

        try:
            await stream_relay_response(history, on_chunk, on_error)
        finally:
            is_streaming = False
            send_btn.enable()
            refresh_messages()

    def new_chat() -> None:
        transcript.clear()
        refresh_messages()

    with ui.column().classes("w-full max-w-3xl mx-auto"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("Jetson Chat")
            ui.button(icon="add", on_click=new_chat).props("flat round")

        messages_container = ui.column().classes("w-full")
        refresh_messages()

        with ui.row().classes("w-full items-end"):
            input_field = (
                ui.textarea(placeholder="Type a message...")
                .props("autogrow dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message)


def main() -> None:
    """Serve the chat page on its own, talking to the relay at API_BASE_URL."""
    ui.run(title="Jetson Chat", port=int(os.getenv("UI_PORT", "8080")), reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
