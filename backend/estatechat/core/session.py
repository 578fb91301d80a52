"""
Session identity helpers.

The session id is an opaque lookup key held in a cookie. It is not a
credential; it only keeps sessions from being casually enumerated.
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Mapping

SESSION_ID_BYTES = 32


@dataclass(frozen=True)
class SessionIdentity:
    session_id: str
    is_new: bool


def new_session_id() -> str:
    """Mint a 256-bit random session id, hex encoded."""
    return secrets.token_hex(SESSION_ID_BYTES)


def resolve_session_id(cookies: Mapping[str, str], cookie_name: str) -> SessionIdentity:
    """
    Return the session id carried by the request cookies.

    Any non-empty cookie value is accepted verbatim. When the cookie is
    missing or empty a fresh id is minted and flagged as new so the caller
    can set it on the response.
    """
    existing = cookies.get(cookie_name)
    if existing:
        return SessionIdentity(session_id=existing, is_new=False)
    return SessionIdentity(session_id=new_session_id(), is_new=True)
