"""Streaming client for the local inference server.

Issues a single streaming POST per relay request. Every request gets its
own ``httpx.AsyncClient`` so nothing is shared between requests; the
client is released together with the response by ``UpstreamStream.aclose``.
"""

import logging
from collections.abc import AsyncIterator
from types import TracebackType

import httpx

from jetson_relay.exceptions import UpstreamStreamBroken, UpstreamUnavailable
from jetson_relay.models.schemas import UpstreamRequest
from jetson_relay.relay.config import RelayConfig

logger = logging.getLogger(__name__)


class UpstreamStream:
    """An open upstream response whose body has not been read yet."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response) -> None:
        self._client = client
        self._response = response
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield the raw body, one item per transport read.

        Raises:
            UpstreamStreamBroken: If the transport fails mid-stream.
        """
        try:
            async for data in self._response.aiter_bytes():
                yield data
        except httpx.HTTPError as e:
            logger.error(f"Upstream stream broken: {e}")
            raise UpstreamStreamBroken(f"Upstream stream broken: {e}") from e

    async def iter_lines(self) -> AsyncIterator[str]:
        """Yield the decoded body line by line, across read boundaries.

        Raises:
            UpstreamStreamBroken: If the transport fails mid-stream.
        """
        try:
            async for line in self._response.aiter_lines():
                yield line
        except httpx.HTTPError as e:
            logger.error(f"Upstream stream broken: {e}")
            raise UpstreamStreamBroken(f"Upstream stream broken: {e}") from e

    async def aclose(self) -> None:
        """Release the response and its client. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()
        logger.debug("Upstream connection released")

    async def __aenter__(self) -> "UpstreamStream":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


class UpstreamClient:
    """Client for the inference server's streaming chat endpoint.

    No retries: a failed request surfaces immediately as UpstreamUnavailable.
    """

    def __init__(
        self,
        config: RelayConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the upstream client.

        Args:
            config: Relay configuration (URL, timeout).
            transport: Optional httpx transport, e.g. a MockTransport in tests.
        """
        self._config = config
        self._transport = transport

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def open_stream(self, request: UpstreamRequest) -> UpstreamStream:
        """Send the request and return the response once its status is known.

        Args:
            request: The streaming chat request.

        Returns:
            UpstreamStream positioned before the first body byte.

        Raises:
            UpstreamUnavailable: On a non-2xx status or if the server is unreachable.
        """
        client = self._create_client()
        http_request = client.build_request(
            "POST",
            self._config.upstream_url,
            json=request.model_dump(),
        )

        try:
            response = await client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error(f"Upstream unreachable at {self._config.upstream_url}: {e}")
            raise UpstreamUnavailable(f"Upstream unreachable: {e}") from e

        if not response.is_success:
            await response.aclose()
            await client.aclose()
            logger.error(f"Upstream responded with status {response.status_code}")
            raise UpstreamUnavailable(
                f"Upstream responded with status {response.status_code}",
                status_code=response.status_code,
            )

        logger.info(
            f"Upstream stream opened: model={request.model}, messages={len(request.messages)}"
        )
        return UpstreamStream(client, response)
