"""Pydantic models (schemas) for the application."""

from estatechat.models.chat_storage import (
    DEFAULT_THREAD_TITLE,
    MAX_THREADS,
    MAX_TITLE_LENGTH,
    ChatMessage,
    ChatStorage,
    ChatStorageRequest,
    ChatThread,
    MessageAttachment,
    MessageContentPart,
)
from estatechat.models.enums import ChatStorageAction, MessageRole

__all__ = [
    "DEFAULT_THREAD_TITLE",
    "MAX_THREADS",
    "MAX_TITLE_LENGTH",
    "ChatMessage",
    "ChatStorage",
    "ChatStorageAction",
    "ChatStorageRequest",
    "ChatThread",
    "MessageAttachment",
    "MessageContentPart",
    "MessageRole",
]
