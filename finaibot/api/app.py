"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finaibot.agent.model_client import AgnoModelClient, ModelClient
from finaibot.api.chat import router as chat_router
from finaibot.profiles import InMemoryProfileStore, ProfileStore, get_profile_store
from finaibot.relay.config import RelayConfig
from finaibot.relay.service import RelayService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Builds the model client from configuration, and the profile store too
    unless one was passed to ``create_app``.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting FinAIBot relay API...")
    if getattr(app.state, "relay_service", None) is None:
        app.state.relay_service = RelayService(
            model_client=AgnoModelClient(),
            profile_store=app.state.profile_store or get_profile_store(),
            config=app.state.relay_config,
        )
    yield
    # Shutdown
    logger.info("Shutting down FinAIBot relay API...")


def create_app(
    model_client: ModelClient | None = None,
    profile_store: ProfileStore | None = None,
    relay_config: RelayConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        model_client: Streaming model client. Built at startup when omitted.
        profile_store: Profile store. Defaults to an empty in-memory store
            when a model client is injected, otherwise to the store named
            by PROFILE_DB_PATH.
        relay_config: Relay pacing settings. Loaded from environment when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="FinAIBot Relay API",
        description=(
            "Streaming chat relay for a personal-finance assistant. Applies the "
            "user's response style, forwards the conversation to a hosted model "
            "and streams the answer back as paced server-sent events."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.profile_store = profile_store
    application.state.relay_config = relay_config
    if model_client is not None:
        application.state.relay_service = RelayService(
            model_client=model_client,
            profile_store=profile_store or InMemoryProfileStore(),
            config=relay_config,
        )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "finaibot-relay"}

    return application


app = create_app()
