"""Relay error taxonomy."""


class RelayError(Exception):
    """Base class for relay failures."""

    pass


class InputMalformed(RelayError):
    """Raised when the inbound request body is missing or has the wrong shape."""

    pass


class UpstreamUnavailable(RelayError):
    """Raised when the inference server rejects or cannot accept the request.

    Attributes:
        status_code: HTTP status returned by the upstream, None if unreachable.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamStreamBroken(RelayError):
    """Raised when reading the upstream body fails mid-stream."""

    pass


class FrameParseError(RelayError):
    """Raised when a single upstream line is not a valid chunk."""

    pass
