"""
Chat storage API endpoints.

Load, save and clear the caller's chat threads. The caller is identified by
the session cookie only.
"""

import json
from typing import Any

from fastapi import APIRouter, Request, Response, status
from pydantic import ValidationError as PydanticValidationError

from estatechat.api.deps import ChatStorageSvc, SessionId
from estatechat.core.exceptions import ValidationError
from estatechat.core.logger import setup_logger
from estatechat.models.chat_storage import ChatStorageRequest
from estatechat.models.enums import ChatStorageAction

logger = setup_logger(__name__)

router = APIRouter()


def _error(response: Response, status_code: int, message: str) -> dict[str, Any]:
    response.status_code = status_code
    return {"success": False, "error": message}


async def _read_body(request: Request) -> ChatStorageRequest:
    raw = await request.body()
    if not raw:
        return ChatStorageRequest()
    try:
        return ChatStorageRequest.model_validate(json.loads(raw))
    except (json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError) as e:
        raise ValidationError("Invalid request body") from e


@router.post("")
async def chat_storage_action(
    request: Request,
    response: Response,
    session_id: SessionId,
    service: ChatStorageSvc,
):
    """Dispatch a load / save / clear action for the current session."""
    try:
        body = await _read_body(request)

        if body.action == ChatStorageAction.LOAD.value:
            result = await service.load(session_id)
            return {
                "success": True,
                "data": result.storage.to_wire(),
                "encrypted": result.encrypted,
            }

        if body.action == ChatStorageAction.SAVE.value:
            storage = await service.save(session_id, body.data)
            return {"success": True, "data": storage.to_wire()}

        if body.action == ChatStorageAction.CLEAR.value:
            await service.clear(session_id)
            return {"success": True}

        return _error(response, status.HTTP_400_BAD_REQUEST, "Invalid action")
    except ValidationError as e:
        return _error(response, status.HTTP_400_BAD_REQUEST, e.message)
    except Exception:
        logger.exception("Chat storage API error")
        return _error(response, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@router.get("")
async def get_chat_storage(
    response: Response,
    session_id: SessionId,
    service: ChatStorageSvc,
):
    """Return the current session's storage without the encrypted mirror."""
    try:
        storage = await service.fetch(session_id)
        return {"success": True, "data": storage.to_wire()}
    except Exception:
        logger.exception("Chat storage GET error")
        return _error(response, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
