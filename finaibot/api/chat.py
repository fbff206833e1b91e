"""Streaming chat endpoint.

Relays one chat exchange to the hosted model and streams the answer back as
``data:`` records terminated by ``data: [DONE]``.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from finaibot.models.schemas import ChatRequest, ErrorResponse
from finaibot.relay.errors import RelayError
from finaibot.relay.rechunker import close_upstream
from finaibot.relay.service import RelayService, encode_stream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def get_relay_service(request: Request) -> RelayService:
    """Return the relay service built at startup."""
    return request.app.state.relay_service


@router.post(
    "/chat",
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)
async def chat(
    chat_request: ChatRequest,
    relay: Annotated[RelayService, Depends(get_relay_service)],
) -> Response:
    """Stream an assistant reply for a conversation.

    Args:
        chat_request: Conversation history, user id and attachment contexts.
        relay: Relay service from application state.

    Returns:
        text/event-stream response of content frames and a final ``[DONE]``.

    Raises:
        422: Invalid request body.
        500: Model unavailable before streaming started (``{"error": ...}``).
    """
    try:
        frames = await relay.open_stream(chat_request)
    except RelayError as e:
        logger.warning(f"Chat relay failed for user {chat_request.user_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=str(e)).model_dump(),
        )

    return StreamingResponse(
        encode_stream(frames),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
        # Releases the model stream when the body was never iterated
        background=BackgroundTask(close_upstream, frames),
    )
