"""NDJSON to Server-Sent Events translation.

Consumes the inference server's newline-delimited JSON body and re-emits
every content fragment as one SSE frame of the form::

    data: {"content":"<fragment>"}\\n\\n

There is no end-of-stream sentinel: the outbound stream ends when the
upstream ends. A line that fails to parse is logged and skipped without
aborting the stream.
"""

import logging
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from jetson_relay.exceptions import FrameParseError
from jetson_relay.models.schemas import RelayFrame, UpstreamChunk

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "


def encode_frame(content: str) -> bytes:
    """Encode a content fragment as one UTF-8 SSE frame."""
    payload = RelayFrame(content=content).model_dump_json()
    return f"{SSE_DATA_PREFIX}{payload}\n\n".encode()


def parse_chunk(line: str) -> UpstreamChunk:
    """Parse one NDJSON line into an UpstreamChunk.

    Raises:
        FrameParseError: If the line is not a JSON object of the expected shape.
    """
    try:
        return UpstreamChunk.model_validate_json(line)
    except ValidationError as e:
        raise FrameParseError(
            f"Invalid upstream line {line[:80]!r}: {e.error_count()} error(s)"
        ) from e


def extract_fragment(line: str) -> str | None:
    """Return the content fragment of an NDJSON line, or None if it has none.

    Raises:
        FrameParseError: If the line cannot be parsed.
    """
    chunk = parse_chunk(line)
    if chunk.error:
        logger.warning(f"Upstream reported an error: {chunk.error}")
    if chunk.done:
        logger.debug("Upstream signalled done")
    return chunk.fragment


async def split_each_read(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Decode and split every upstream read on its own.

    An object or a multi-byte character straddling two reads comes out as
    broken pieces, which then fail to parse and are skipped.
    """
    async for data in chunks:
        for line in data.decode("utf-8", errors="replace").split("\n"):
            yield line


async def translate_stream(lines: AsyncIterable[str]) -> AsyncIterator[bytes]:
    """Translate NDJSON lines into SSE frames.

    Each line pulled from ``lines`` is a suspension point; at most one frame
    is produced per line and it is yielded as soon as the line arrives.
    Blank lines are ignored.

    Args:
        lines: Upstream body lines, without their terminators.

    Yields:
        Encoded SSE frames.

    Raises:
        Exception: Any error from ``lines`` is logged and re-raised, which
            aborts the outbound stream.
    """
    frames = 0
    skipped = 0

    try:
        async for line in lines:
            if not line.strip():
                continue
            try:
                fragment = extract_fragment(line)
            except FrameParseError as e:
                skipped += 1
                logger.warning(f"Skipping upstream line: {e}")
                continue
            if fragment is None:
                continue
            frames += 1
            yield encode_frame(fragment)
    except Exception as e:
        logger.error(f"Stream processing error after {frames} frame(s): {e}")
        raise

    logger.debug(f"Upstream stream finished: {frames} frame(s), {skipped} line(s) skipped")
