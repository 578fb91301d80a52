"""API routers."""

from estatechat.api import chat_storage

__all__ = ["chat_storage"]
