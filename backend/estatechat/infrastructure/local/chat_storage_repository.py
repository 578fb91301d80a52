"""
In-memory implementation of the chat storage repository.

State lives for the lifetime of the repository instance only.
"""

from __future__ import annotations

import asyncio

from estatechat.core.logger import setup_logger
from estatechat.interfaces.chat_storage_repository import IChatStorageRepository
from estatechat.models.chat_storage import MAX_THREADS, ChatStorage

logger = setup_logger(__name__)


class InMemoryChatStorageRepository(IChatStorageRepository):
    """Dict-backed chat storage keyed by session id."""

    def __init__(self, max_threads: int = MAX_THREADS, enforce_active_thread: bool = False):
        if max_threads < 1:
            raise ValueError("max_threads must be at least 1")
        self._max_threads = max_threads
        self._enforce_active_thread = enforce_active_thread
        self._storages: dict[str, ChatStorage] = {}
        self._lock = asyncio.Lock()

    async def get(self, session_id: str) -> ChatStorage:
        """Get a copy of the stored value, or an empty storage."""
        async with self._lock:
            stored = self._storages.get(session_id)
        if stored is None:
            return ChatStorage()
        return stored.model_copy(deep=True)

    async def put(self, session_id: str, storage: ChatStorage) -> ChatStorage:
        """Store the newest threads up to the retention limit."""
        threads = storage.threads
        if len(threads) > self._max_threads:
            logger.debug(
                "Evicting %d oldest threads for session",
                len(threads) - self._max_threads,
            )
            threads = threads[-self._max_threads:]

        active_thread_id = storage.active_thread_id
        if self._enforce_active_thread and active_thread_id is not None:
            if not any(thread.id == active_thread_id for thread in threads):
                active_thread_id = None

        limited = ChatStorage(
            threads=[thread.model_copy(deep=True) for thread in threads],
            active_thread_id=active_thread_id,
        )
        async with self._lock:
            self._storages[session_id] = limited
        return limited.model_copy(deep=True)

    async def delete(self, session_id: str) -> None:
        """Remove a session's storage."""
        async with self._lock:
            self._storages.pop(session_id, None)
