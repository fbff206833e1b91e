"""Pydantic models for the chat relay wire format and transcript.

Provides type safety and validation on both ends of the relay stream.

Models:
    - ConversationTurn: One message in the chat transcript
    - AttachmentRef: File metadata and preview reference
    - ChatRequest: Incoming relay request payload
    - ContentFrame / DoneFrame: Stream frame variants
    - ErrorResponse: Non-streaming failure body
    - UserProfile: Profile store record
"""

from finaibot.models.schemas import (
    DEFAULT_STYLE,
    AttachmentRef,
    ChatRequest,
    ContentFrame,
    ConversationTurn,
    DoneFrame,
    ErrorResponse,
    Role,
    StreamFrame,
    StylePreference,
    UserProfile,
)

__all__ = [
    "DEFAULT_STYLE",
    "AttachmentRef",
    "ChatRequest",
    "ContentFrame",
    "ConversationTurn",
    "DoneFrame",
    "ErrorResponse",
    "Role",
    "StreamFrame",
    "StylePreference",
    "UserProfile",
]
