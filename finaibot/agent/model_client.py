"""Hosted model client built on Agno.

The relay only needs an opaque streaming text source, so the client exposes a
single ``stream`` method yielding text fragments. The Agno agent is built once
from configuration at process start and handed to the relay explicitly.

Architecture Decisions:

1. **No session storage** - The caller sends the whole conversation with every
   request, so the agent keeps no history and no database.

2. **Errors propagate** - Upstream failures are raised, never folded into the
   text stream. The relay decides whether the caller sees an error response or
   an aborted stream.

3. **Provider switch** - Gemini by default, OpenAI or any OpenAI-compatible
   endpoint via ``LLM_PROVIDER=openai`` and ``LLM_BASE_URL``.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from typing import Protocol

from agno.agent import Agent
from agno.models.google import Gemini
from agno.models.openai import OpenAIChat
from agno.run.agent import RunContentEvent, RunErrorEvent

from finaibot.agent.config import AgentConfig, get_agent_config
from finaibot.relay.errors import UpstreamModelError

logger = logging.getLogger(__name__)


class ModelClient(Protocol):
    """Streaming text source consumed by the relay."""

    def stream(self, parts: list[str]) -> AsyncIterator[str]: ...


class AgnoModelClient:
    """Streams completions from a hosted model through an Agno agent."""

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the model client.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._agent = self._create_agent()

    def _create_model(self) -> Gemini | OpenAIChat:
        if self._config.provider == "openai":
            return OpenAIChat(
                id=self._config.model_name,
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                temperature=self._config.temperature,
                top_p=self._config.top_p,
                max_tokens=self._config.max_tokens,
            )

        return Gemini(
            id=self._config.model_name,
            api_key=self._config.api_key,
            temperature=self._config.temperature,
            top_p=self._config.top_p,
            top_k=self._config.top_k,
            max_output_tokens=self._config.max_tokens,
        )

    def _create_agent(self) -> Agent:
        """Create the Agno agent instance.

        Returns:
            Configured Agent without storage; prompts arrive fully assembled.
        """
        agent = Agent(
            model=self._create_model(),
            # Output as markdown for rich formatting in UI
            markdown=True,
        )
        logger.info(
            f"Model client ready: provider={self._config.provider}, model={self._config.model_name}"
        )
        return agent

    async def stream(self, parts: list[str]) -> AsyncGenerator[str]:
        """Stream completion text for an assembled prompt.

        Args:
            parts: Ordered prompt fragments.

        Yields:
            Text fragments as they arrive.

        Raises:
            UpstreamModelError: If the model reports an error event.
        """
        prompt = "\n".join(parts)
        response_stream = self._agent.arun(prompt, stream=True)

        async for event in response_stream:
            if isinstance(event, RunErrorEvent):
                raise UpstreamModelError(event.content or "Model run failed")
            if isinstance(event, RunContentEvent) and isinstance(event.content, str):
                if event.content:
                    yield event.content
