"""Agno-backed hosted model access and prompt assembly.

Responsibilities:
    - Model client construction from configuration
    - Streaming text generation for the relay
    - Priming transcript and style directives

Maintains clean separation from the HTTP layer.
"""

from finaibot.agent.config import AgentConfig, get_agent_config
from finaibot.agent.model_client import AgnoModelClient, ModelClient
from finaibot.agent.prompts import PromptTemplates, build_prompt

__all__ = [
    "AgentConfig",
    "AgnoModelClient",
    "ModelClient",
    "PromptTemplates",
    "build_prompt",
    "get_agent_config",
]
