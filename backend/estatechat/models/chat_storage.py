"""
Chat storage models.

Threads and messages travel as camelCase JSON; fields are snake_case in
Python and serialized with ``by_alias=True``.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from estatechat.models.enums import MessageRole

MAX_THREADS = 50
MAX_TITLE_LENGTH = 200
DEFAULT_THREAD_TITLE = "New Conversation"
THREAD_TITLE_PREVIEW_LENGTH = 50


class MessageContentPart(BaseModel):
    """One typed part of structured message content."""

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., description="Part type, e.g. text or image")
    text: Optional[str] = Field(None, description="Text for text parts")
    image: Optional[str] = Field(None, description="Image URL or data URL for image parts")


class MessageAttachment(BaseModel):
    """File attached to a message."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    content_type: str = Field(..., alias="contentType")
    url: str


class ChatMessage(BaseModel):
    """
    Chat message as produced by the UI.

    The server never inspects messages; this model is used by the client
    facade to build well-formed ones.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    role: MessageRole
    content: Union[str, list[MessageContentPart]]
    created_at: str = Field(..., alias="createdAt")
    attachments: Optional[list[MessageAttachment]] = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON shape stored inside threads."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChatThread(BaseModel):
    """One conversation: ordered messages plus metadata."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = Field(DEFAULT_THREAD_TITLE, max_length=MAX_TITLE_LENGTH)
    messages: list[Any] = Field(default_factory=list)
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")


class ChatStorage(BaseModel):
    """All threads of one session plus the active thread pointer."""

    model_config = ConfigDict(populate_by_name=True)

    threads: list[ChatThread] = Field(default_factory=list)
    active_thread_id: Optional[str] = Field(None, alias="activeThreadId")

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape used on the wire."""
        return self.model_dump(mode="json", by_alias=True)


class ChatStorageRequest(BaseModel):
    """Body of POST /api/chat-storage."""

    action: Optional[str] = Field(None, description="load | save | clear")
    data: Any = Field(None, description="Storage payload for save")
