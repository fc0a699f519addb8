"""Relay configuration.

Pydantic-based configuration for the upstream inference server. The
upstream URL and model identifier are fixed defaults of this version and
are passed into the relay at construction time rather than read from the
environment.
"""

from pydantic import BaseModel, Field, field_validator

DEFAULT_UPSTREAM_URL = "http://localhost:11434/api/chat"
DEFAULT_MODEL = "jakerains/jetsonv2"
DEFAULT_TIMEOUT_SECONDS = 120.0


class RelayConfig(BaseModel):
    """Configuration for the streaming relay.

    Attributes:
        upstream_url: Chat endpoint of the local inference server.
        model_name: Model identifier sent with every upstream request.
        timeout_seconds: httpx timeout for the upstream request (None disables it).
        buffer_partial_lines: Carry partial NDJSON lines across reads.
    """

    upstream_url: str = Field(
        default=DEFAULT_UPSTREAM_URL,
        description="Chat endpoint of the local inference server",
    )
    model_name: str = Field(
        default=DEFAULT_MODEL,
        description="Model to request from the inference server",
    )
    timeout_seconds: float | None = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0.0,
        description="Upstream request timeout in seconds, None for no timeout",
    )
    buffer_partial_lines: bool = Field(
        default=True,
        description="Reassemble NDJSON lines split across upstream reads",
    )

    @field_validator("upstream_url")
    @classmethod
    def validate_upstream_url(cls, v: str) -> str:
        """Validate that the upstream URL is an absolute http(s) URL."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError("upstream_url must start with http:// or https://")
        return v

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate that a model identifier is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("model_name is required")
        return v.strip()


def get_relay_config() -> RelayConfig:
    """Create the default relay configuration.

    Returns:
        RelayConfig with the built-in upstream URL and model.
    """
    return RelayConfig()
