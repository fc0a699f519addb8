"""Pydantic models for the relay's wire formats.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Browser-side message (role + text)
    - RelayRequest: Incoming relay request payload
    - UpstreamRequest: Streaming chat request for the inference server
    - UpstreamChunk: One line of the inference server's NDJSON reply
    - RelayFrame: Payload of one outbound SSE frame
"""

from jetson_relay.models.schemas import (
    ChatMessage,
    RelayFrame,
    RelayRequest,
    UpstreamChunk,
    UpstreamMessage,
    UpstreamRequest,
    map_role,
)

__all__ = [
    "ChatMessage",
    "RelayFrame",
    "RelayRequest",
    "UpstreamChunk",
    "UpstreamMessage",
    "UpstreamRequest",
    "map_role",
]
