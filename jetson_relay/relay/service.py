"""Relay service wiring the upstream client through the stream translator.

The relay runs as one async generator per request, pulled by the ASGI
server. Closing the generator (normal end, error or client disconnect)
releases the upstream connection.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing

from jetson_relay.models.schemas import ChatMessage, UpstreamMessage, UpstreamRequest, map_role
from jetson_relay.relay.config import RelayConfig, get_relay_config
from jetson_relay.relay.translator import split_each_read, translate_stream
from jetson_relay.relay.upstream import UpstreamClient, UpstreamStream

logger = logging.getLogger(__name__)


class RelayStream:
    """SSE frames for one relay request.

    Iterate it to receive encoded frames. ``aclose`` releases the upstream
    even when iteration never started.
    """

    def __init__(self, upstream: UpstreamStream, buffer_partial_lines: bool = True) -> None:
        self._upstream = upstream
        self._buffer_partial_lines = buffer_partial_lines

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._frames()

    async def _frames(self) -> AsyncIterator[bytes]:
        if self._buffer_partial_lines:
            lines = self._upstream.iter_lines()
        else:
            lines = split_each_read(self._upstream.iter_bytes())
        frames = translate_stream(lines)
        try:
            async with aclosing(frames):
                async for frame in frames:
                    yield frame
        finally:
            await self._upstream.aclose()
            logger.debug("Relay stream closed")

    async def aclose(self) -> None:
        await self._upstream.aclose()


class RelayService:
    """Relays a chat history to the inference server and streams the reply."""

    def __init__(
        self,
        config: RelayConfig | None = None,
        upstream: UpstreamClient | None = None,
    ) -> None:
        """Initialize the relay service.

        Args:
            config: Relay configuration. Uses the built-in defaults if not provided.
            upstream: Upstream client. Created from ``config`` if not provided.
        """
        self._config = config or get_relay_config()
        self._upstream = upstream or UpstreamClient(self._config)

    @property
    def config(self) -> RelayConfig:
        return self._config

    def build_upstream_request(self, messages: Sequence[ChatMessage]) -> UpstreamRequest:
        """Convert the browser's history into a streaming upstream request.

        Raises:
            InputMalformed: If a message has an unsupported role.
        """
        return UpstreamRequest(
            model=self._config.model_name,
            messages=[
                UpstreamMessage(role=map_role(message.role), content=message.text)
                for message in messages
            ],
        )

    async def open_relay(self, messages: Sequence[ChatMessage]) -> RelayStream:
        """Open the upstream and return the outbound frame stream.

        All failures that happen before streaming starts are raised here.

        Raises:
            InputMalformed: If a message has an unsupported role.
            UpstreamUnavailable: If the inference server fails or is unreachable.
        """
        upstream_request = self.build_upstream_request(messages)
        stream = await self._upstream.open_stream(upstream_request)
        return RelayStream(stream, buffer_partial_lines=self._config.buffer_partial_lines)
