"""Client side of the chat relay.

``StreamConsumer`` owns one chat transcript. Each submission appends a user
turn and an empty assistant turn, then fills the assistant turn in place as
frames arrive, so the UI can show the reply being typed.
"""

import logging
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from finaibot.models.schemas import ConversationTurn, DoneFrame, Role
from finaibot.parsing.attachments import DEFAULT_MAX_INLINE_CHARS, UploadedFile, process_attachments
from finaibot.streaming.frames import FrameDecodeError, decode_frame, iter_event_payloads

load_dotenv()

logger = logging.getLogger(__name__)

APOLOGY_MESSAGE = "Sorry, I encountered an error. Please try again."


class ConsumerConfig(BaseModel):
    """Settings for talking to the relay.

    Attributes:
        api_base_url: Base URL of the relay API.
        user_id: Identifier sent with every request.
        timeout: Request timeout in seconds.
        max_attachment_chars: Upper bound on inlined text per attachment.
    """

    api_base_url: str = Field(
        default_factory=lambda: os.getenv("API_BASE_URL", "http://localhost:8000")
    )
    user_id: str = Field(default_factory=lambda: os.getenv("CHAT_USER_ID", "default"))
    timeout: float = Field(default=120.0, gt=0)
    max_attachment_chars: int = Field(
        default_factory=lambda: int(
            os.getenv("MAX_ATTACHMENT_CHARS", str(DEFAULT_MAX_INLINE_CHARS))
        ),
        ge=1,
    )

    @property
    def chat_url(self) -> str:
        return f"{self.api_base_url.rstrip('/')}/api/chat"


class RelayStreamError(Exception):
    """Raised when the relay stream ends without its sentinel."""

    pass


class StreamConsumer:
    """Drives chat submissions and rebuilds assistant replies from the stream.

    Only one submission runs at a time per consumer.
    """

    def __init__(
        self,
        config: ConsumerConfig | None = None,
        client: httpx.AsyncClient | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        """Initialize the consumer.

        Args:
            config: Relay settings. Loads from environment if not provided.
            client: Optional shared HTTP client. A client is created per
                    request when omitted.
            on_change: Called after every transcript change.
        """
        self._config = config or ConsumerConfig()
        self._client = client
        self._on_change = on_change
        self.transcript: list[ConversationTurn] = []
        self.is_streaming = False

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def _replace_content(self, turn_id: str, content: str) -> None:
        for index, turn in enumerate(self.transcript):
            if turn.id == turn_id:
                self.transcript[index] = turn.model_copy(update={"content": content})
                break
        self._notify()

    def _find(self, turn_id: str) -> ConversationTurn | None:
        return next((turn for turn in self.transcript if turn.id == turn_id), None)

    def reset(self) -> None:
        """Start a new chat."""
        if self.is_streaming:
            return
        self.transcript.clear()
        self._notify()

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            yield client

    async def _stream_reply(self, payload: dict[str, Any], turn_id: str) -> str:
        content = ""
        async with (
            self._http_client() as client,
            client.stream(
                "POST",
                self._config.chat_url,
                json=payload,
                headers={"Accept": "text/event-stream"},
            ) as response,
        ):
            response.raise_for_status()
            content_type = response.headers.get("content-type", "")
            if "text/event-stream" not in content_type:
                raise RelayStreamError(f"Unexpected content type: {content_type!r}")

            async for data in iter_event_payloads(response.aiter_text()):
                try:
                    frame = decode_frame(data)
                except FrameDecodeError as e:
                    logger.warning(f"Skipping malformed frame: {e}")
                    continue

                if isinstance(frame, DoneFrame):
                    return content

                content += frame.content
                self._replace_content(turn_id, content)

        raise RelayStreamError("Stream ended before the [DONE] sentinel")

    async def submit(
        self,
        user_text: str,
        attachments: list[UploadedFile] | None = None,
    ) -> ConversationTurn | None:
        """Send a message and stream the assistant's reply into the transcript.

        Args:
            user_text: The user's message.
            attachments: Files attached to the message.

        Returns:
            The finished assistant turn, or None if the submission was
            rejected (empty input or another submission in flight).
        """
        attachments = attachments or []
        if self.is_streaming or (not user_text.strip() and not attachments):
            return None

        self.is_streaming = True
        try:
            processed = process_attachments(attachments, self._config.max_attachment_chars)
            history = list(self.transcript)

            user_turn = ConversationTurn(
                role=Role.USER,
                content=user_text,
                attachments=[item.preview for item in processed],
            )
            assistant_turn = ConversationTurn(role=Role.ASSISTANT, content="")
            self.transcript.extend([user_turn, assistant_turn])
            self._notify()

            payload = {
                "messages": [turn.to_wire() for turn in [*history, user_turn]],
                "userId": self._config.user_id,
                "fileContents": [item.context for item in processed],
            }

            try:
                await self._stream_reply(payload, assistant_turn.id)
            except (httpx.HTTPError, RelayStreamError) as e:
                logger.error(f"Chat error: {e}")
                self._replace_content(assistant_turn.id, APOLOGY_MESSAGE)

            return self._find(assistant_turn.id)
        finally:
            self.is_streaming = False
            self._notify()
