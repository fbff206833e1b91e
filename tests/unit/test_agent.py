"""Unit tests for AgnoModelClient and AgentConfig.

Tests configuration validation, model construction and stream filtering.
"""

from dataclasses import dataclass
from unittest.mock import MagicMock, patch

import pytest
from pydantic import ValidationError

from finaibot.agent.config import AgentConfig, get_agent_config
from finaibot.relay.errors import UpstreamModelError


@dataclass
class ContentEvent:
    content: object = None


@dataclass
class ErrorEvent:
    content: str | None = None


@dataclass
class OtherEvent:
    content: object = None


def scripted_run(*events):
    async def arun(prompt, stream=False):
        for event in events:
            yield event

    return arun


class TestAgentConfig:
    """Tests for AgentConfig validation."""

    def test_valid_config_with_all_fields(self) -> None:
        """Config accepts valid values for all fields."""
        config = AgentConfig(
            provider="openai",
            api_key="sk-test-key-12345",
            base_url="https://llm.example.com/v1",
            model_name="gpt-4o",
            temperature=0.5,
            top_p=0.9,
            top_k=20,
            max_tokens=2048,
        )

        assert config.provider == "openai"
        assert config.api_key == "sk-test-key-12345"
        assert config.base_url == "https://llm.example.com/v1"
        assert config.model_name == "gpt-4o"
        assert config.temperature == 0.5
        assert config.max_tokens == 2048

    def test_config_with_default_values(self) -> None:
        """Config uses the Gemini defaults when only API key provided."""
        config = AgentConfig(provider="gemini", api_key="k")

        assert config.temperature == 0.4
        assert config.top_p == 0.95
        assert config.top_k == 40
        assert config.max_tokens == 8192

    def test_config_fails_with_missing_api_key(self) -> None:
        """Config raises ValueError when API key is missing."""
        with pytest.raises(ValidationError) as exc_info:
            AgentConfig(api_key="")

        assert "API key required" in str(exc_info.value)

    def test_config_fails_with_whitespace_api_key(self) -> None:
        """Config rejects whitespace-only API key."""
        with pytest.raises(ValidationError) as exc_info:
            AgentConfig(api_key="   ")

        assert "API key required" in str(exc_info.value)

    def test_config_strips_api_key_whitespace(self) -> None:
        config = AgentConfig(api_key="  sk-test-key  ")

        assert config.api_key == "sk-test-key"

    def test_config_rejects_unknown_provider(self) -> None:
        with pytest.raises(ValidationError):
            AgentConfig(api_key="k", provider="anthropic")

    def test_config_fails_with_temperature_out_of_range(self) -> None:
        """Config rejects temperature outside 0.0 to 2.0."""
        for temperature in (-0.1, 2.5):
            with pytest.raises(ValidationError) as exc_info:
                AgentConfig(api_key="k", temperature=temperature)

            assert "temperature" in str(exc_info.value).lower()

    def test_config_accepts_boundary_temperatures(self) -> None:
        """Config accepts temperature at boundaries (0.0 and 2.0)."""
        config_low = AgentConfig(api_key="k", temperature=0.0)
        config_high = AgentConfig(api_key="k", temperature=2.0)

        assert config_low.temperature == 0.0
        assert config_high.temperature == 2.0

    def test_config_fails_with_max_tokens_out_of_range(self) -> None:
        """Config rejects max_tokens below 1 or above 128000."""
        for max_tokens in (0, 200000):
            with pytest.raises(ValidationError) as exc_info:
                AgentConfig(api_key="k", max_tokens=max_tokens)

            assert "max_tokens" in str(exc_info.value).lower()


class TestGetAgentConfig:
    """Tests for get_agent_config factory function."""

    def test_get_config_from_environment(self) -> None:
        """get_agent_config reads provider, key and model from the environment."""
        env = {
            "LLM_PROVIDER": "OpenAI",
            "LLM_API_KEY": "sk-env-key",
            "LLM_MODEL": "gpt-4o-mini",
            "LLM_BASE_URL": "",
        }
        with patch.dict("os.environ", env):
            config = get_agent_config()

        assert config.provider == "openai"
        assert config.api_key == "sk-env-key"
        assert config.model_name == "gpt-4o-mini"
        assert config.base_url is None

    def test_gemini_key_used_when_generic_key_missing(self) -> None:
        env = {"LLM_API_KEY": "", "GEMINI_API_KEY": "gm-key", "LLM_PROVIDER": "gemini"}
        with patch.dict("os.environ", env):
            assert get_agent_config().api_key == "gm-key"

    def test_get_config_fails_without_any_key(self) -> None:
        env = {"LLM_API_KEY": "", "GEMINI_API_KEY": "", "OPENAI_API_KEY": ""}
        with patch.dict("os.environ", env), pytest.raises(ValidationError):
            get_agent_config()


@patch("finaibot.agent.model_client.Agent")
class TestAgnoModelClientInit:
    """Tests for model construction."""

    @patch("finaibot.agent.model_client.Gemini")
    def test_gemini_model_built_from_config(
        self,
        mock_gemini: MagicMock,
        mock_agent_class: MagicMock,
    ) -> None:
        from finaibot.agent.model_client import AgnoModelClient

        config = AgentConfig(provider="gemini", api_key="gm-key", model_name="gemini-2.0-flash")

        AgnoModelClient(config=config)

        mock_gemini.assert_called_once_with(
            id="gemini-2.0-flash",
            api_key="gm-key",
            temperature=0.4,
            top_p=0.95,
            top_k=40,
            max_output_tokens=8192,
        )
        call_kwargs = mock_agent_class.call_args.kwargs
        assert call_kwargs["model"] is mock_gemini.return_value
        assert call_kwargs["markdown"] is True

    @patch("finaibot.agent.model_client.OpenAIChat")
    def test_openai_model_built_from_config(
        self,
        mock_openai_chat: MagicMock,
        mock_agent_class: MagicMock,
    ) -> None:
        from finaibot.agent.model_client import AgnoModelClient

        config = AgentConfig(
            provider="openai",
            api_key="sk-custom-key",
            base_url="http://localhost:11434/v1",
            model_name="gpt-4o",
            temperature=0.3,
            max_tokens=4096,
        )

        AgnoModelClient(config=config)

        mock_openai_chat.assert_called_once_with(
            id="gpt-4o",
            api_key="sk-custom-key",
            base_url="http://localhost:11434/v1",
            temperature=0.3,
            top_p=0.95,
            max_tokens=4096,
        )


@patch("finaibot.agent.model_client.RunErrorEvent", ErrorEvent)
@patch("finaibot.agent.model_client.RunContentEvent", ContentEvent)
@patch("finaibot.agent.model_client.Gemini")
@patch("finaibot.agent.model_client.Agent")
class TestAgnoModelClientStream:
    """Tests for streaming text out of agent events."""

    async def test_yields_only_text_content(
        self,
        mock_agent_class: MagicMock,
        mock_gemini: MagicMock,
    ) -> None:
        from finaibot.agent.model_client import AgnoModelClient

        mock_agent_class.return_value.arun = scripted_run(
            OtherEvent("started"),
            ContentEvent("Pay "),
            ContentEvent(""),
            ContentEvent({"structured": True}),
            ContentEvent("yourself first."),
        )
        client = AgnoModelClient(config=AgentConfig(provider="gemini", api_key="k"))

        fragments = [fragment async for fragment in client.stream(["a", "b"])]

        assert fragments == ["Pay ", "yourself first."]

    async def test_prompt_parts_joined_by_newline(
        self,
        mock_agent_class: MagicMock,
        mock_gemini: MagicMock,
    ) -> None:
        from finaibot.agent.model_client import AgnoModelClient

        prompts: list[str] = []

        async def arun(prompt, stream=False):
            prompts.append(prompt)
            yield ContentEvent("ok")

        mock_agent_class.return_value.arun = arun
        client = AgnoModelClient(config=AgentConfig(provider="gemini", api_key="k"))

        _ = [fragment async for fragment in client.stream(["System: be brief", "input: hi"])]

        assert prompts == ["System: be brief\ninput: hi"]

    async def test_error_event_raises(
        self,
        mock_agent_class: MagicMock,
        mock_gemini: MagicMock,
    ) -> None:
        from finaibot.agent.model_client import AgnoModelClient

        mock_agent_class.return_value.arun = scripted_run(
            ContentEvent("Partial"),
            ErrorEvent("quota exceeded"),
        )
        client = AgnoModelClient(config=AgentConfig(provider="gemini", api_key="k"))

        seen: list[str] = []
        with pytest.raises(UpstreamModelError, match="quota exceeded"):
            async for fragment in client.stream(["x"]):
                seen.append(fragment)

        assert seen == ["Partial"]
