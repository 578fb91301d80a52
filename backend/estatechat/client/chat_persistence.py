"""
Client-side persistence facade for chat threads.

Holds an optimistic local copy of the session's storage. Every mutation is
applied locally first and then saved to the chat storage endpoint; network
failures are logged and the local copy stays the source of truth.
"""

from __future__ import annotations

import secrets
import string
import time
from typing import Any, Iterable, Mapping, Optional, Union

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from estatechat.core.exceptions import TransportError
from estatechat.core.logger import setup_logger
from estatechat.models.chat_storage import (
    DEFAULT_THREAD_TITLE,
    MAX_TITLE_LENGTH,
    THREAD_TITLE_PREVIEW_LENGTH,
    ChatMessage,
    ChatStorage,
    ChatThread,
)
from estatechat.models.enums import ChatStorageAction, MessageRole
from estatechat.utils.datetime_utils import now_iso

logger = setup_logger(__name__)

DEFAULT_ENDPOINT = "/api/chat-storage"
_ID_ALPHABET = string.digits + string.ascii_lowercase

MessageLike = Union[ChatMessage, Mapping[str, Any]]


def generate_thread_id() -> str:
    """Return an id like ``thread_1718000000000_k3j9x0a2b``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"thread_{int(time.time() * 1000)}_{suffix}"


def create_new_thread() -> ChatThread:
    """Build an empty thread with the default title."""
    now = now_iso()
    return ChatThread(
        id=generate_thread_id(),
        title=DEFAULT_THREAD_TITLE,
        messages=[],
        created_at=now,
        updated_at=now,
    )


def _to_wire(value: Any) -> Any:
    if isinstance(value, ChatMessage):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


def _message_text(message: Mapping[str, Any]) -> str:
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        for part in content:
            part = _to_wire(part)
            if isinstance(part, Mapping) and part.get("type") == "text":
                return part.get("text") or ""
    return ""


def generate_thread_title(messages: Iterable[MessageLike]) -> str:
    """
    Derive a thread title from its first user message.

    Takes the first text of that message, trimmed to 50 characters with
    "..." appended when cut. Falls back to the default title.
    """
    first_user = None
    for message in messages:
        message = _to_wire(message)
        if isinstance(message, Mapping) and message.get("role") == MessageRole.USER.value:
            first_user = message
            break
    if first_user is None:
        return DEFAULT_THREAD_TITLE

    content = _message_text(first_user).strip()
    title = content[:THREAD_TITLE_PREVIEW_LENGTH]
    if len(title) < len(content):
        return f"{title}..."
    return title or DEFAULT_THREAD_TITLE


class ChatPersistence:
    """
    Stateful accessor used by the UI to manage chat threads.

    Use as an async context manager to load on entry and close on exit:

        async with ChatPersistence(base_url="http://localhost:8000") as chats:
            thread = await chats.create_thread()
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.AsyncClient] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = 10.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None
        self._endpoint = endpoint
        self._storage = ChatStorage()
        self._is_loading = True

    async def __aenter__(self) -> "ChatPersistence":
        await self.load()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ===========================================
    # Read access
    # ===========================================

    @property
    def threads(self) -> list[ChatThread]:
        return list(self._storage.threads)

    @property
    def active_thread_id(self) -> Optional[str]:
        return self._storage.active_thread_id

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def storage(self) -> ChatStorage:
        return self._storage.model_copy(deep=True)

    def get_active_thread(self) -> Optional[ChatThread]:
        """Return the active thread, or None if the id matches no thread."""
        for thread in self._storage.threads:
            if thread.id == self._storage.active_thread_id:
                return thread
        return None

    # ===========================================
    # Server sync
    # ===========================================

    async def load(self) -> None:
        """Hydrate local state from the server; keep the last good state on failure."""
        try:
            payload = await self._post(ChatStorageAction.LOAD)
            self._storage = ChatStorage.model_validate(payload["data"])
        except TransportError as e:
            logger.error("Failed to load chat storage: %s", e.message)
        except (KeyError, TypeError, PydanticValidationError) as e:
            logger.error("Chat storage load returned an unexpected payload: %s", e)
        finally:
            self._is_loading = False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _post(self, action: ChatStorageAction, data: Any = None) -> dict[str, Any]:
        try:
            response = await self._client.post(
                self._endpoint,
                json={"action": action.value, "data": data},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(f"API error: {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Error fetching from storage API: {e}") from e
        except ValueError as e:
            raise TransportError(f"Storage API returned a non-JSON response: {e}") from e

    async def _save(self, storage: ChatStorage) -> None:
        self._storage = storage
        try:
            await self._post(ChatStorageAction.SAVE, storage.to_wire())
        except TransportError as e:
            logger.error("Failed to save chat storage: %s", e.message)

    # ===========================================
    # Mutations
    # ===========================================

    async def create_thread(self) -> ChatThread:
        """Append a new empty thread and make it active."""
        thread = create_new_thread()
        await self._save(
            ChatStorage(
                threads=[*self._storage.threads, thread],
                active_thread_id=thread.id,
            )
        )
        return thread

    async def select_thread(self, thread_id: str) -> None:
        """Set the active thread id. Membership is not checked."""
        await self._save(self._storage.model_copy(update={"active_thread_id": thread_id}))

    async def update_thread(self, thread_id: str, **updates: Any) -> None:
        """
        Merge fields into a thread and bump its updated timestamp.

        Titles are cut to the storage limit. Raises ValueError for unknown
        fields, invalid values, or an id already used by another thread.
        """
        unknown = set(updates) - set(ChatThread.model_fields)
        if unknown:
            raise ValueError(f"Unknown thread fields: {sorted(unknown)}")
        if isinstance(updates.get("title"), str):
            updates["title"] = updates["title"][:MAX_TITLE_LENGTH]
        new_id = updates.get("id", thread_id)
        if new_id != thread_id and any(t.id == new_id for t in self._storage.threads):
            raise ValueError(f"Thread id {new_id!r} is already in use")

        threads = []
        for thread in self._storage.threads:
            if thread.id == thread_id:
                thread = ChatThread.model_validate(
                    {**thread.model_dump(), **updates, "updated_at": now_iso()}
                )
            threads.append(thread)
        await self._save(self._storage.model_copy(update={"threads": threads}))

    async def delete_thread(self, thread_id: str) -> None:
        """Remove a thread, moving the active pointer to the first remaining one."""
        threads = [thread for thread in self._storage.threads if thread.id != thread_id]
        active_thread_id = self._storage.active_thread_id
        if active_thread_id == thread_id:
            active_thread_id = threads[0].id if threads else None
        await self._save(ChatStorage(threads=threads, active_thread_id=active_thread_id))

    async def add_message_to_thread(self, thread_id: str, message: MessageLike) -> None:
        """Append a message; the first message also sets the thread title."""
        wire_message = dict(_to_wire(message))
        threads = []
        for thread in self._storage.threads:
            if thread.id == thread_id:
                messages = [*thread.messages, wire_message]
                title = generate_thread_title(messages) if not thread.messages else thread.title
                thread = thread.model_copy(
                    update={"messages": messages, "title": title, "updated_at": now_iso()}
                )
            threads.append(thread)
        await self._save(self._storage.model_copy(update={"threads": threads}))

    async def clear_all_threads(self) -> None:
        """Drop every thread and the active pointer."""
        await self._save(ChatStorage())
