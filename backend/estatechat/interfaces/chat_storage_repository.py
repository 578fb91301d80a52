"""
Chat storage repository interface.

Defines the contract for per-session chat history persistence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from estatechat.models.chat_storage import ChatStorage


class IChatStorageRepository(ABC):
    """Abstract interface for session-keyed chat storage."""

    @abstractmethod
    async def get(self, session_id: str) -> ChatStorage:
        """
        Get the storage for a session.

        Args:
            session_id: Opaque session identifier

        Returns:
            Stored ChatStorage, or an empty one if nothing is stored
        """
        pass

    @abstractmethod
    async def put(self, session_id: str, storage: ChatStorage) -> ChatStorage:
        """
        Replace the storage for a session.

        Implementations keep only the most recently appended threads up to
        their retention limit, dropping the oldest first.

        Args:
            session_id: Opaque session identifier
            storage: Sanitized storage to persist

        Returns:
            The storage as persisted (after retention)
        """
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """
        Remove a session's storage. No error if absent.

        Args:
            session_id: Opaque session identifier
        """
        pass
