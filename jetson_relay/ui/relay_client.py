"""SSE consumer and in-memory transcript for the chat page.

Reads the relay's ``data:`` frames line by line and accumulates their
content into the single in-flight bot message.
"""

import json
import logging
import os
from collections.abc import Callable

import httpx

DEFAULT_PORT = "8000"
SSE_DATA_PREFIX = "data: "

logger = logging.getLogger(__name__)


def api_base_url() -> str:
    """Relay API location: API_BASE_URL, else the local server on PORT."""
    return os.getenv("API_BASE_URL") or f"http://localhost:{os.getenv('PORT', DEFAULT_PORT)}"


def parse_sse_line(line: str) -> str | None:
    """Return the content fragment carried by one SSE line, if any."""
    if not line.startswith(SSE_DATA_PREFIX):
        return None
    try:
        data = json.loads(line[len(SSE_DATA_PREFIX):])
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring malformed SSE data: {e}")
        return None
    if not isinstance(data, dict):
        return None
    content = data.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class ChatTranscript:
    """Ordered, in-memory message list for one browser session."""

    def __init__(self) -> None:
        self.messages: list[dict[str, str]] = []

    def add_user_message(self, text: str) -> None:
        self.messages.append({"role": "user", "text": text})

    def start_bot_message(self) -> None:
        """Append an empty bot message to receive streamed fragments."""
        self.messages.append({"role": "bot", "text": ""})

    def append_to_bot_message(self, fragment: str) -> None:
        """Append a fragment to the in-flight bot message.

        Raises:
            ValueError: If the last message is not a bot message.
        """
        if not self.messages or self.messages[-1]["role"] != "bot":
            raise ValueError("No bot message in flight")
        self.messages[-1]["text"] += fragment

    def replace_bot_message(self, text: str) -> None:
        """Overwrite the in-flight bot message, e.g. with an error notice.

        Raises:
            ValueError: If the last message is not a bot message.
        """
        if not self.messages or self.messages[-1]["role"] != "bot":
            raise ValueError("No bot message in flight")
        self.messages[-1]["text"] = text

    def history(self) -> list[dict[str, str]]:
        """Messages to send to the relay, without an empty in-flight reply."""
        messages = list(self.messages)
        if messages and messages[-1]["role"] == "bot" and not messages[-1]["text"]:
            messages.pop()
        return [dict(m) for m in messages]

    def clear(self) -> None:
        self.messages.clear()


async def stream_relay_response(
    messages: list[dict[str, str]],
    on_chunk: Callable[[str], None],
    on_error: Callable[[str], None],
    client: httpx.AsyncClient | None = None,
) -> None:
    """Consume the SSE stream from the /api/chat endpoint.

    Args:
        messages: Conversation to relay, oldest first.
        on_chunk: Called with each content fragment, in order.
        on_error: Called once with a description if the request fails.
        client: Optional client to use instead of one bound to ``api_base_url()``.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(base_url=api_base_url(), timeout=120.0)

    try:
        async with client.stream(
            "POST",
            "/api/chat",
            json={"messages": messages},
            headers={"Accept": "text/event-stream"},
        ) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                if fragment := parse_sse_line(line):
                    on_chunk(fragment)
    except httpx.HTTPStatusError as e:
        on_error(f"HTTP {e.response.status_code}")
    except httpx.RequestError as e:
        on_error(f"Connection failed: {e}")
    finally:
        if owns_client:
            await client.aclose()
