"""
Chat storage service.

Load, save, clear and fetch operations over the session-keyed thread store,
plus sanitation of incoming payloads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from estatechat.core.config import Settings, get_settings
from estatechat.core.exceptions import DecryptionError, ValidationError
from estatechat.core.logger import setup_logger
from estatechat.core.security import decrypt_payload, encrypt_payload
from estatechat.interfaces.chat_storage_repository import IChatStorageRepository
from estatechat.models.chat_storage import MAX_TITLE_LENGTH, ChatStorage, ChatThread

logger = setup_logger(__name__)


@dataclass
class LoadResult:
    """Plaintext storage plus its encrypted mirror."""

    storage: ChatStorage
    encrypted: str


def coerce_text(value: Any) -> str:
    """
    Coerce an arbitrary JSON value to text.

    None becomes "null" and booleans "true"/"false" so coerced values read
    the same as their JSON source.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _is_unset(value: Any) -> bool:
    """True for the scalar JSON values that clear the active pointer: null, "", 0, false, NaN."""
    if value is None or isinstance(value, bool):
        return not value
    if isinstance(value, (str, int, float)):
        return not value or value != value
    return False


def sanitize_thread(raw: Any) -> ChatThread:
    """Coerce one incoming thread to the canonical shape."""
    if not isinstance(raw, Mapping):
        raw = {}
    messages = raw.get("messages")
    return ChatThread(
        id=coerce_text(raw.get("id")),
        title=coerce_text(raw.get("title"))[:MAX_TITLE_LENGTH],
        messages=list(messages) if isinstance(messages, list) else [],
        created_at=coerce_text(raw.get("createdAt")),
        updated_at=coerce_text(raw.get("updatedAt")),
    )


def sanitize_storage(data: Any) -> ChatStorage:
    """
    Validate and sanitize a save payload.

    Raises:
        ValidationError: if the payload is not a mapping with list-shaped threads
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("threads"), list):
        raise ValidationError("Invalid data structure")

    # A repeated id keeps its first position and takes the last content.
    by_id: dict[str, ChatThread] = {}
    for raw_thread in data["threads"]:
        thread = sanitize_thread(raw_thread)
        by_id[thread.id] = thread

    active = data.get("activeThreadId")
    return ChatStorage(
        threads=list(by_id.values()),
        active_thread_id=None if _is_unset(active) else coerce_text(active),
    )


class ChatStorageService:
    """Session-scoped operations over the chat storage repository."""

    def __init__(self, repo: IChatStorageRepository, settings: Optional[Settings] = None):
        self.repo = repo
        self.settings = settings or get_settings()

    async def load(self, session_id: str) -> LoadResult:
        """
        Load a session's storage with an encrypted mirror.

        The encrypted copy only adds confidentiality when a caller stores or
        forwards it apart from the plaintext field.
        """
        storage = await self.repo.get(session_id)
        encrypted = encrypt_payload(json.dumps(storage.to_wire()), self.settings)
        return LoadResult(storage=storage, encrypted=encrypted)

    async def fetch(self, session_id: str) -> ChatStorage:
        """Load a session's storage without the encrypted mirror."""
        return await self.repo.get(session_id)

    async def save(self, session_id: str, data: Any) -> ChatStorage:
        """
        Sanitize and persist a storage payload.

        Raises:
            ValidationError: missing or malformed payload; nothing is stored
        """
        if data is None:
            raise ValidationError("No data provided")
        storage = sanitize_storage(data)
        persisted = await self.repo.put(session_id, storage)
        logger.debug("Saved %d threads", len(persisted.threads))
        return persisted

    async def clear(self, session_id: str) -> None:
        """Remove everything stored for a session."""
        await self.repo.delete(session_id)

    def decrypt_snapshot(self, envelope: str) -> ChatStorage:
        """
        Turn an encrypted Load mirror back into a ChatStorage.

        Raises:
            DecryptionError: the envelope does not decrypt or is not a storage
        """
        plaintext = decrypt_payload(envelope, self.settings)
        try:
            return ChatStorage.model_validate(json.loads(plaintext))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error("Decrypted snapshot is not a chat storage: %s", e)
            raise DecryptionError("Failed to decrypt data") from None
