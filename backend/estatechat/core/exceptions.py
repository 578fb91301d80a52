"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class EstateChatError(Exception):
    """Base exception for estatechat."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(EstateChatError):
    """Malformed or missing request payload."""

    pass


class DecryptionError(EstateChatError):
    """Opaque decryption failure surfaced to callers."""

    pass


class FormatError(DecryptionError):
    """Encrypted envelope does not have the expected shape."""

    pass


class AuthenticityError(DecryptionError):
    """Authentication tag did not verify."""

    pass


class TransportError(EstateChatError):
    """Client could not reach the storage service."""

    pass


class InfrastructureError(EstateChatError):
    """Infrastructure-related error (storage backend, external services, etc.)."""

    pass
