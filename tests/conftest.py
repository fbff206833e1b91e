"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: Pacing settings with no post-flush delay
    - fake_model: Scripted streaming model client
    - profile_store: Counting in-memory profile store with sample users
    - app: FastAPI app wired to the fakes
    - async_client: HTTPX client for API testing
"""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from finaibot.api.app import create_app
from finaibot.models.schemas import UserProfile
from finaibot.relay.config import RelayConfig
from tests.fakes import CountingProfileStore, FakeModelClient


@pytest.fixture
def relay_config() -> RelayConfig:
    """Relay settings without pacing delay so tests run fast."""
    return RelayConfig(flush_interval_ms=100, min_words=3, pacing_delay_ms=0)


@pytest.fixture
def fake_model() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def profile_store() -> CountingProfileStore:
    """Profile store with one user per style and one without a preference."""
    return CountingProfileStore(
        [
            UserProfile(user_id="u1", ai_preference="quick"),
            UserProfile(user_id="u-detailed", ai_preference="detailed"),
            UserProfile(user_id="u-balanced", ai_preference="balanced"),
            UserProfile(user_id="u-none"),
            UserProfile(user_id="u-odd", ai_preference="verbose"),
            UserProfile(
                user_id="u-rich",
                ai_preference="balanced",
                financial_data={
                    "profile": {"name": "Ada"},
                    "finances": {"income": {"amount": 5200}},
                    "budgets": [{"category": "Groceries", "limit": 400}],
                    "transactions": [],
                    "goals": [{"name": "Emergency fund", "target": 10000}],
                },
            ),
        ]
    )


@pytest.fixture
def app(
    fake_model: FakeModelClient,
    profile_store: CountingProfileStore,
    relay_config: RelayConfig,
) -> FastAPI:
    return create_app(
        model_client=fake_model,
        profile_store=profile_store,
        relay_config=relay_config,
    )


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    App exceptions are not re-raised so an aborted stream looks like a
    truncated response, as it would over the network.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
