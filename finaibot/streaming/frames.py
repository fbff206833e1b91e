"""Event-stream framing for relay frames.

Content frames travel as ``data: {"content": "..."}`` records and the end of a
stream as the literal ``data: [DONE]`` record. Records are separated by a
blank line.
"""

import json
import logging
from collections.abc import AsyncIterable, AsyncIterator

from pydantic import ValidationError

from finaibot.models.schemas import ContentFrame, DoneFrame, StreamFrame

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_TOKEN = "[DONE]"
FRAME_SEPARATOR = "\n\n"


class FrameDecodeError(ValueError):
    """Raised when a stream payload is not a valid frame."""

    pass


def encode_frame(frame: StreamFrame) -> str:
    """Encode a frame as one event-stream record."""
    if isinstance(frame, DoneFrame):
        return f"{DATA_PREFIX} {DONE_TOKEN}{FRAME_SEPARATOR}"
    payload = json.dumps({"content": frame.content}, ensure_ascii=False)
    return f"{DATA_PREFIX} {payload}{FRAME_SEPARATOR}"


def decode_frame(payload: str) -> StreamFrame:
    """Decode the payload of a ``data:`` line into a frame.

    Args:
        payload: Text after the ``data:`` prefix.

    Returns:
        DoneFrame for the sentinel, otherwise a validated ContentFrame.

    Raises:
        FrameDecodeError: If the payload is not JSON or fails validation.
    """
    payload = payload.strip()
    if payload == DONE_TOKEN:
        return DoneFrame()

    try:
        return ContentFrame.model_validate_json(payload)
    except ValidationError as e:
        raise FrameDecodeError(f"Invalid frame payload: {payload[:80]!r}") from e


def _payloads_in_record(record: str) -> list[str]:
    payloads = []
    for line in record.split("\n"):
        line = line.rstrip("\r")
        if line.startswith(DATA_PREFIX):
            payloads.append(line[len(DATA_PREFIX):].removeprefix(" "))
    return payloads


async def iter_event_payloads(chunks: AsyncIterable[str]) -> AsyncIterator[str]:
    """Reassemble event-stream records from arbitrary text chunks.

    Transport chunks do not line up with records, so text is buffered until a
    blank-line boundary is seen. A trailing record without a boundary is
    emitted once the input ends.

    Args:
        chunks: Decoded response body text, in arrival order.

    Yields:
        The payload of each ``data:`` line, in order.
    """
    buffer = ""
    async for chunk in chunks:
        # CRLF pairs can straddle chunks, so normalise the joined buffer
        buffer = (buffer + chunk).replace("\r\n", "\n")
        while FRAME_SEPARATOR in buffer:
            record, buffer = buffer.split(FRAME_SEPARATOR, 1)
            for payload in _payloads_in_record(record):
                yield payload

    if buffer.strip():
        logger.debug("Stream ended with an unterminated record")
        for payload in _payloads_in_record(buffer):
            yield payload
