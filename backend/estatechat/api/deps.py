"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request, Response

from estatechat.core.config import Settings, get_settings
from estatechat.core.session import resolve_session_id
from estatechat.interfaces.chat_storage_repository import IChatStorageRepository
from estatechat.services.chat_storage_service import ChatStorageService


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_chat_storage_repository() -> IChatStorageRepository:
    """Get chat storage repository instance."""
    settings = get_settings()
    if settings.STORAGE_BACKEND == "memory":
        from estatechat.infrastructure.local.chat_storage_repository import (
            InMemoryChatStorageRepository,
        )
        return InMemoryChatStorageRepository(
            max_threads=settings.CHAT_MAX_THREADS,
            enforce_active_thread=settings.CHAT_ENFORCE_ACTIVE_THREAD,
        )
    raise NotImplementedError(f"Storage backend {settings.STORAGE_BACKEND!r} not implemented")


# ===========================================
# Service Dependencies
# ===========================================


def get_chat_storage_service(
    repo: Annotated[IChatStorageRepository, Depends(get_chat_storage_repository)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ChatStorageService:
    """Get chat storage service bound to the configured repository."""
    return ChatStorageService(repo, settings)


# ===========================================
# Session Dependencies
# ===========================================


def get_session_id(
    request: Request,
    response: Response,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """
    Resolve the caller's chat session id.

    A newly minted id is set as a cookie on the response so the client
    keeps the same session on later requests.
    """
    identity = resolve_session_id(request.cookies, settings.CHAT_SESSION_COOKIE)
    if identity.is_new:
        response.set_cookie(
            key=settings.CHAT_SESSION_COOKIE,
            value=identity.session_id,
            max_age=settings.CHAT_SESSION_MAX_AGE_SECONDS,
            httponly=True,
            secure=settings.CHAT_SESSION_COOKIE_SECURE,
            samesite="lax",
            path="/",
        )
    return identity.session_id


# ===========================================
# Type Aliases
# ===========================================

ChatStorageRepo = Annotated[IChatStorageRepository, Depends(get_chat_storage_repository)]
ChatStorageSvc = Annotated[ChatStorageService, Depends(get_chat_storage_service)]
SessionId = Annotated[str, Depends(get_session_id)]
