"""Re-chunking of the hosted model's token stream into paced frames.

The model yields arbitrarily small fragments. Sending each one as its own
frame makes the typed-text effect jittery, so fragments are buffered and
flushed on sentence ends, on a minimum word count, or after a time threshold.
"""

import asyncio
import re
import time
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable

from finaibot.models.schemas import ContentFrame, DoneFrame, StreamFrame
from finaibot.relay.config import RelayConfig

SENTENCE_END = re.compile(r"[.!?]\s*$")


def should_flush(buffer: str, elapsed: float, config: RelayConfig) -> bool:
    """Decide whether the buffer is ready to be sent.

    Args:
        buffer: Text accumulated since the last flush.
        elapsed: Seconds since the last flush.
        config: Relay pacing settings.

    Returns:
        True if the buffer ends a sentence, holds enough words, or has waited
        longer than the flush interval.
    """
    if not buffer:
        return False
    return (
        SENTENCE_END.search(buffer) is not None
        or len(buffer.split()) >= config.min_words
        or elapsed > config.flush_interval
    )


async def close_upstream(iterator: AsyncIterator) -> None:
    """Close an upstream iterator if it supports closing."""
    aclose = getattr(iterator, "aclose", None)
    if aclose is not None:
        await aclose()


async def rechunk(
    fragments: AsyncIterator[str],
    config: RelayConfig,
    *,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> AsyncGenerator[StreamFrame]:
    """Buffer upstream fragments into content frames ending with a sentinel.

    Frames concatenate to exactly the upstream text. Upstream errors propagate
    without a sentinel so the consumer can tell an aborted stream from a
    completed one. The upstream iterator is closed however the generator exits.

    Args:
        fragments: Text fragments from the hosted model.
        config: Relay pacing settings.
        clock: Monotonic clock in seconds.
        sleep: Awaitable used for the post-flush pacing delay.

    Yields:
        ContentFrame values followed by exactly one DoneFrame.
    """
    buffer = ""
    last_flush = clock()
    try:
        async for fragment in fragments:
            if not fragment:
                continue

            buffer += fragment
            now = clock()
            if should_flush(buffer, now - last_flush, config):
                yield ContentFrame(content=buffer)
                buffer = ""
                last_flush = now
                if config.pacing_delay > 0:
                    await sleep(config.pacing_delay)

        if buffer:
            yield ContentFrame(content=buffer)
        yield DoneFrame()
    finally:
        await close_upstream(fragments)
