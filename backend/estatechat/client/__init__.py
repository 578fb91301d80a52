"""Client-side access to the chat storage API."""

from estatechat.client.chat_persistence import (
    ChatPersistence,
    create_new_thread,
    generate_thread_id,
    generate_thread_title,
)

__all__ = [
    "ChatPersistence",
    "create_new_thread",
    "generate_thread_id",
    "generate_thread_title",
]
