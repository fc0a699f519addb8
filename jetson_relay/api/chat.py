"""SSE relay endpoint.

Receives the browser's message history, forwards it to the inference
server and streams the reply back as Server-Sent Events.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from jetson_relay.models.schemas import RelayRequest
from jetson_relay.relay.service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def get_relay_service(request: Request) -> RelayService:
    """Return the relay service attached to the running application."""
    return request.app.state.relay_service


@router.post(
    "/chat",
    status_code=status.HTTP_200_OK,
    summary="Relay a chat completion via Server-Sent Events",
)
async def relay_chat(
    payload: RelayRequest,
    relay: RelayService = Depends(get_relay_service),
) -> StreamingResponse:
    """Stream the inference server's reply to the given history.

    Each content fragment is sent as ``data: {"content": "..."}`` followed by
    a blank line. The stream closes when the upstream closes.

    Args:
        payload: RelayRequest holding the conversation so far.
        relay: The relay service.

    Returns:
        StreamingResponse with media type ``text/event-stream``.

    Raises:
        InputMalformed: Unsupported message role (rendered as 500).
        UpstreamUnavailable: Upstream failed before streaming (rendered as 500).
    """
    frames = await relay.open_relay(payload.messages)
    logger.info(f"Relaying chat with {len(payload.messages)} message(s)")

    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(frames.aclose),
    )
