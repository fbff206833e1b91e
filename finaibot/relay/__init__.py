"""Streaming chat relay.

Bridges a chat request to the hosted model and paces the model's token
stream into event-stream frames.

Responsibilities:
    - Per-request style resolution from the profile store
    - Prompt assembly with file and personal-finance context
    - Re-chunking of model fragments into human-paced frames
    - Clean termination with a sentinel frame
"""

from finaibot.relay.config import RelayConfig, get_relay_config
from finaibot.relay.errors import RelayError, UpstreamModelError, UpstreamUnavailableError
from finaibot.relay.rechunker import rechunk, should_flush

__all__ = [
    "RelayConfig",
    "RelayError",
    "UpstreamModelError",
    "UpstreamUnavailableError",
    "get_relay_config",
    "rechunk",
    "should_flush",
]
