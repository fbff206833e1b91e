"""Relay pacing configuration with environment variable loading."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class RelayConfig(BaseModel):
    """Re-chunking and pacing settings for the relay stream.

    Attributes:
        flush_interval_ms: Flush when more than this many milliseconds have
            passed since the previous flush.
        min_words: Flush once the buffer holds this many whitespace-separated words.
        pacing_delay_ms: Pause after every flush so the UI types at reading speed.
    """

    flush_interval_ms: int = Field(
        default_factory=lambda: int(os.getenv("RELAY_FLUSH_INTERVAL_MS", "100")),
        ge=0,
    )
    min_words: int = Field(
        default_factory=lambda: int(os.getenv("RELAY_MIN_WORDS", "3")),
        ge=1,
    )
    pacing_delay_ms: int = Field(
        default_factory=lambda: int(os.getenv("RELAY_PACING_DELAY_MS", "30")),
        ge=0,
    )

    @property
    def flush_interval(self) -> float:
        return self.flush_interval_ms / 1000

    @property
    def pacing_delay(self) -> float:
        return self.pacing_delay_ms / 1000


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment."""
    return RelayConfig()
