"""
Enum definitions for the application.
"""

from enum import Enum


class MessageRole(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatStorageAction(str, Enum):
    """Actions accepted by the chat storage endpoint."""

    LOAD = "load"
    SAVE = "save"
    CLEAR = "clear"
