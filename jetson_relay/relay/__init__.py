"""Streaming relay between the browser and the local inference server.

Responsibilities:
    - Upstream request construction with role mapping
    - Single streaming POST to the inference server
    - NDJSON to Server-Sent Events translation
    - Upstream connection cleanup on completion, error or disconnect

Maintains clean separation from the HTTP layer.
"""

from jetson_relay.exceptions import (
    FrameParseError,
    InputMalformed,
    RelayError,
    UpstreamStreamBroken,
    UpstreamUnavailable,
)
from jetson_relay.relay.config import RelayConfig, get_relay_config
from jetson_relay.relay.service import RelayService, RelayStream

__all__ = [
    "FrameParseError",
    "InputMalformed",
    "RelayConfig",
    "RelayError",
    "RelayService",
    "RelayStream",
    "UpstreamStreamBroken",
    "UpstreamUnavailable",
    "get_relay_config",
]
