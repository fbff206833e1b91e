"""Agent configuration with environment variable loading.

Pydantic-based configuration for the hosted model behind the relay.
Supports Gemini (default) and OpenAI or OpenAI-compatible APIs.
"""

import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _api_key_from_env() -> str:
    return (
        os.getenv("LLM_API_KEY")
        or os.getenv("GEMINI_API_KEY")
        or os.getenv("OPENAI_API_KEY", "")
    )


class AgentConfig(BaseModel):
    """Configuration for the hosted chat model.

    Attributes:
        provider: Model backend, "gemini" or "openai".
        api_key: API key for model access.
        base_url: API base URL for OpenAI-compatible providers.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        top_p: Nucleus sampling cutoff.
        top_k: Top-k sampling cutoff (Gemini only).
        max_tokens: Maximum tokens in generated response.
    """

    provider: Literal["gemini", "openai"] = Field(
        default_factory=lambda: os.getenv("LLM_PROVIDER", "gemini").lower(),
        validate_default=True,
        description="Model backend",
    )
    api_key: str = Field(
        default_factory=_api_key_from_env,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL") or None,
        description="API base URL (None for provider default)",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gemini-2.0-flash"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    top_p: float = Field(
        default=0.95,
        gt=0.0,
        le=1.0,
        description="Nucleus sampling cutoff",
    )
    top_k: int = Field(
        default=40,
        ge=1,
        description="Top-k sampling cutoff",
    )
    max_tokens: int = Field(
        default=8192,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set LLM_API_KEY, GEMINI_API_KEY or OPENAI_API_KEY in .env"
            )
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
