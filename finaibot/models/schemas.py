import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Speaker of a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"


class StylePreference(str, Enum):
    """Per-user response style selecting the assistant's system directive."""

    DETAILED = "detailed"
    QUICK = "quick"
    BALANCED = "balanced"


DEFAULT_STYLE = StylePreference.BALANCED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AttachmentRef(BaseModel):
    """Descriptive reference to a file attached to a user turn.

    Attributes:
        name: Original filename.
        mime_type: MIME type reported for the file.
        size_bytes: File size in bytes.
        url: Renderable preview reference (data URL). Never sent to the relay.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    mime_type: str = Field("application/octet-stream", alias="mimeType")
    size_bytes: int = Field(0, ge=0, alias="sizeBytes")
    url: str | None = None


class ConversationTurn(BaseModel):
    """One message in the chat transcript.

    Attributes:
        id: Client-side identifier used to replace the in-progress turn.
        role: Speaker (user or assistant).
        content: Message text.
        created_at: Creation timestamp.
        attachments: Files attached to a user turn.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str = ""
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    attachments: list[AttachmentRef] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """Serialize for the relay request body (no id, no preview URLs)."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude={"id": True, "attachments": {"__all__": {"url"}}},
        )


class ChatRequest(BaseModel):
    """Request payload for the chat relay endpoint.

    Attributes:
        messages: Conversation history, oldest first.
        user_id: Identifier used for the profile lookup. Trusted as supplied.
        file_contents: Context strings for the latest turn's attachments.
    """

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ConversationTurn] = Field(default_factory=list)
    user_id: str = Field(..., min_length=1, alias="userId")
    file_contents: list[str] = Field(default_factory=list, alias="fileContents")

    @field_validator("user_id", mode="before")
    @classmethod
    def strip_user_id(cls, v: str) -> str:
        """Strip whitespace from user id before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ContentFrame(BaseModel):
    """A chunk of assistant text on the relay stream."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["content"] = Field("content", exclude=True)
    content: str = Field(..., min_length=1)


class DoneFrame(BaseModel):
    """Terminal sentinel marking a clean end of stream."""

    kind: Literal["done"] = Field("done", exclude=True)


StreamFrame = ContentFrame | DoneFrame


class ErrorResponse(BaseModel):
    """Body returned when the relay fails before streaming begins."""

    error: str


class UserProfile(BaseModel):
    """Profile data the relay reads from the profile store.

    Attributes:
        user_id: Profile key.
        ai_preference: Raw stored style value, validated by the relay.
        financial_data: Profile, finances, budgets, transactions and goals.
    """

    user_id: str
    ai_preference: str | None = None
    financial_data: dict[str, Any] | None = None
