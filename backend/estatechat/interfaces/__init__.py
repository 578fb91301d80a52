"""Abstract interfaces for infrastructure abstraction."""

from estatechat.interfaces.chat_storage_repository import IChatStorageRepository

__all__ = ["IChatStorageRepository"]
