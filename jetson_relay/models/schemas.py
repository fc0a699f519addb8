from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from jetson_relay.exceptions import InputMalformed

# Browser roles to upstream roles. Already-mapped roles map to themselves.
ROLE_MAP: dict[str, str] = {
    "user": "user",
    "bot": "assistant",
    "assistant": "assistant",
}


def map_role(role: str) -> str:
    """Map a browser-side role to the role the inference server expects.

    Args:
        role: One of ``user``, ``bot`` or ``assistant``.

    Returns:
        ``user`` or ``assistant``.

    Raises:
        InputMalformed: If the role is not recognised.
    """
    try:
        return ROLE_MAP[role]
    except KeyError:
        raise InputMalformed(f"Unsupported message role: {role!r}") from None


class ChatMessage(BaseModel):
    """A chat message as sent by the browser.

    Attributes:
        role: The speaker (user or bot).
        text: The message text.
    """

    role: str
    text: str


class RelayRequest(BaseModel):
    """Request payload for the relay endpoint.

    Attributes:
        messages: Conversation so far, oldest first.
    """

    messages: list[ChatMessage]


class UpstreamMessage(BaseModel):
    """A chat message in the inference server's format."""

    role: Literal["user", "assistant"]
    content: str


class UpstreamRequest(BaseModel):
    """Streaming chat request sent to the inference server.

    Attributes:
        model: Model identifier.
        messages: Conversation in upstream format, order preserved.
        stream: Always true.
    """

    model: str
    messages: list[UpstreamMessage]
    stream: Literal[True] = True


class UpstreamChunkMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: str | None = None


class UpstreamChunk(BaseModel):
    """One NDJSON line of the inference server's streamed reply.

    Only ``message.content`` is relayed; ``done`` and ``error`` are read
    for logging.
    """

    model_config = ConfigDict(extra="ignore")

    message: UpstreamChunkMessage | None = None
    done: bool = False
    error: str | None = None

    @property
    def fragment(self) -> str | None:
        """Non-empty content fragment carried by this chunk, if any."""
        if self.message is None or not self.message.content:
            return None
        return self.message.content


class RelayFrame(BaseModel):
    """Payload of one SSE frame sent to the browser."""

    content: str = Field(..., description="Content fragment of the reply")
