"""Relay stream framing shared by the relay and the consumer."""

from finaibot.streaming.frames import (
    DONE_TOKEN,
    FrameDecodeError,
    decode_frame,
    encode_frame,
    iter_event_payloads,
)

__all__ = [
    "DONE_TOKEN",
    "FrameDecodeError",
    "decode_frame",
    "encode_frame",
    "iter_event_payloads",
]
