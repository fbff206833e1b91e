"""Chat relay between the consumer and the hosted model.

One call to ``RelayService.open_stream`` handles one chat exchange:

1. Read the user's profile (once per request, no caching, no retry).
2. Resolve the response style, defaulting to balanced.
3. Assemble the prompt: priming transcript, style directive, optional file
   and personal-finance context, then the conversation.
4. Start the model stream, re-chunk it into frames and wait for the first
   frame. A failure before that frame exists is reported as
   ``UpstreamUnavailableError`` so the caller can answer with a plain error
   response instead of a stream.
5. Hand back the remaining frames, starting with the one already read.
"""

import asyncio
import logging
import time
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable

from finaibot.agent.model_client import ModelClient
from finaibot.agent.prompts import PromptTemplates, build_prompt
from finaibot.models.schemas import (
    DEFAULT_STYLE,
    ChatRequest,
    ConversationTurn,
    DoneFrame,
    Role,
    StreamFrame,
    StylePreference,
    UserProfile,
)
from finaibot.parsing.file_context import format_file_content
from finaibot.profiles.store import ProfileStore
from finaibot.relay.config import RelayConfig, get_relay_config
from finaibot.relay.errors import UpstreamUnavailableError
from finaibot.relay.rechunker import close_upstream, rechunk
from finaibot.streaming.frames import encode_frame

logger = logging.getLogger(__name__)


def resolve_style(profile: UserProfile | None) -> StylePreference:
    """Map a stored preference onto a style, defaulting to balanced."""
    raw = profile.ai_preference if profile else None
    if raw is None:
        return DEFAULT_STYLE
    try:
        return StylePreference(raw)
    except ValueError:
        logger.warning(f"Unknown style preference {raw!r}, using {DEFAULT_STYLE.value}")
        return DEFAULT_STYLE


class FrameStream:
    """Frame iterator whose first frame was read ahead.

    ``aclose`` reaches the re-chunker, and through it the model stream, even
    when iteration never started.
    """

    def __init__(self, first: StreamFrame, rest: AsyncGenerator[StreamFrame]) -> None:
        self._first: StreamFrame | None = first
        self._rest = rest

    def __aiter__(self) -> "FrameStream":
        return self

    async def __anext__(self) -> StreamFrame:
        if self._first is not None:
            frame, self._first = self._first, None
            return frame
        return await anext(self._rest)

    async def aclose(self) -> None:
        self._first = None
        await self._rest.aclose()


class RelayService:
    """Streams one chat exchange from the hosted model to the caller.

    Collaborators are injected so tests can supply a fake model and store.
    """

    def __init__(
        self,
        model_client: ModelClient,
        profile_store: ProfileStore,
        config: RelayConfig | None = None,
        templates: PromptTemplates | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._model_client = model_client
        self._profile_store = profile_store
        self._config = config or get_relay_config()
        self._templates = templates or PromptTemplates()
        self._clock = clock
        self._sleep = sleep

    async def load_profile(self, user_id: str) -> UserProfile | None:
        """Read the user's profile; lookup failures count as no profile."""
        try:
            return await self._profile_store.get_profile(user_id)
        except Exception as e:
            logger.warning(f"Profile lookup failed for user {user_id}: {e}")
            return None

    def _file_context_block(self, request: ChatRequest, latest: ConversationTurn) -> str | None:
        if not request.file_contents or not latest.attachments:
            return None

        blocks = []
        for index, attachment in enumerate(latest.attachments):
            if index < len(request.file_contents):
                content = request.file_contents[index] or (
                    f"[File: {attachment.name} - No content available]"
                )
            else:
                content = f"[File: {attachment.name} - Content missing]"
            blocks.append(format_file_content(content, attachment.name))

        return self._templates.file_context("\n\n".join(blocks))

    def _financial_context_block(
        self, profile: UserProfile | None, latest: ConversationTurn
    ) -> str | None:
        if latest.role != Role.USER or not self._templates.asks_for_insights(latest.content):
            return None
        if profile is None or not profile.financial_data:
            return None
        return self._templates.financial_context(profile.financial_data)

    def build_parts(
        self, request: ChatRequest, style: StylePreference, profile: UserProfile | None
    ) -> list[str]:
        """Assemble the prompt fragments for a request."""
        context_blocks: list[str] = []
        if request.messages:
            latest = request.messages[-1]
            file_block = self._file_context_block(request, latest)
            if file_block:
                context_blocks.append(file_block)
            else:
                financial_block = self._financial_context_block(profile, latest)
                if financial_block:
                    context_blocks.append(financial_block)

        return build_prompt(self._templates, style, request.messages, context_blocks)

    async def open_stream(self, request: ChatRequest) -> FrameStream:
        """Start the model stream for a request.

        Args:
            request: Validated chat request.

        Returns:
            FrameStream of content frames, then one DoneFrame.

        Raises:
            UpstreamUnavailableError: If the model fails before the first
                frame is ready.
        """
        profile = await self.load_profile(request.user_id)
        style = resolve_style(profile)
        parts = self.build_parts(request, style, profile)
        logger.info(
            f"Relaying {len(request.messages)} messages for user {request.user_id} "
            f"(style={style.value})"
        )

        frames = rechunk(
            self._model_client.stream(parts),
            self._config,
            clock=self._clock,
            sleep=self._sleep,
        )
        try:
            first = await anext(frames)
        except Exception as e:
            logger.error(f"Model stream failed before the first frame: {e}", exc_info=True)
            await frames.aclose()
            raise UpstreamUnavailableError("Failed to generate response") from e

        if isinstance(first, DoneFrame):
            logger.warning("Model returned an empty stream")
        return FrameStream(first, frames)


async def encode_stream(frames: AsyncIterator[StreamFrame]) -> AsyncGenerator[str]:
    """Encode frames as event-stream records.

    Errors after streaming has begun are logged and re-raised so the
    transport aborts the response; no recovery frame is written.
    """
    try:
        async for frame in frames:
            yield encode_frame(frame)
    except asyncio.CancelledError:
        logger.info("Client disconnected, releasing relay stream")
        raise
    except Exception as e:
        logger.error(f"Relay stream aborted: {e}", exc_info=True)
        raise
    finally:
        await close_upstream(frames)
