"""FastAPI endpoints for the FinAIBot chat relay.

Streaming route with async request handling and Server-Sent Events.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streaming chat relay
"""

from finaibot.api.app import app, create_app

__all__ = ["app", "create_app"]
