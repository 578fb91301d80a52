"""
Encryption helpers for chat storage snapshots.

Envelopes are AES-256-GCM: ``<ivHex>:<authTagHex>:<ciphertextHex>``.
"""

from __future__ import annotations

import hashlib
import re
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from estatechat.core.config import Settings
from estatechat.core.exceptions import AuthenticityError, DecryptionError, FormatError
from estatechat.core.logger import setup_logger

logger = setup_logger(__name__)

KEY_BYTES = 32
IV_BYTES = 16
TAG_BYTES = 16
ENVELOPE_SEPARATOR = ":"
DEFAULT_DEV_SECRET = "default-secret-key-for-development"

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")
_dev_secret_warned = False


def derive_encryption_key(settings: Settings) -> bytes:
    """
    Resolve the 256-bit symmetric key.

    A well-formed hex CHAT_ENCRYPTION_KEY is used as is. Anything else falls
    back to SHA-256 of APP_SECRET, or of a fixed development constant when
    no secret is configured.
    """
    configured = settings.CHAT_ENCRYPTION_KEY
    if configured and len(configured) == KEY_BYTES * 2:
        try:
            return bytes.fromhex(configured)
        except ValueError:
            logger.warning("CHAT_ENCRYPTION_KEY is not valid hex; deriving key from APP_SECRET")

    secret = settings.APP_SECRET
    if not secret:
        _warn_dev_secret()
        secret = DEFAULT_DEV_SECRET
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt_payload(plaintext: str, settings: Settings) -> str:
    """Encrypt text into a self-contained envelope with a fresh IV."""
    key = derive_encryption_key(settings)
    iv = secrets.token_bytes(IV_BYTES)
    sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_BYTES], sealed[-TAG_BYTES:]
    return _format_envelope(iv, tag, ciphertext)


def decrypt_payload(envelope: str, settings: Settings) -> str:
    """
    Decrypt an envelope produced by encrypt_payload.

    Raises:
        DecryptionError: for any malformed, tampered or wrong-key input.
            The specific cause is only logged.
    """
    try:
        iv, tag, ciphertext = _parse_envelope(envelope)
        key = derive_encryption_key(settings)
        try:
            plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, None)
        except (InvalidTag, ValueError) as e:
            raise AuthenticityError("Authentication tag verification failed") from e
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise AuthenticityError("Decrypted payload is not valid UTF-8") from e
    except DecryptionError as e:
        logger.error("Decryption error: %s", e.message)
        raise DecryptionError("Failed to decrypt data") from None


def _format_envelope(iv: bytes, tag: bytes, ciphertext: bytes) -> str:
    return ENVELOPE_SEPARATOR.join((iv.hex(), tag.hex(), ciphertext.hex()))


def _parse_envelope(envelope: str) -> tuple[bytes, bytes, bytes]:
    if not isinstance(envelope, str):
        raise FormatError("Envelope must be a string")
    parts = envelope.split(ENVELOPE_SEPARATOR)
    if len(parts) != 3:
        raise FormatError("Invalid encrypted data format")
    iv_hex, tag_hex, ciphertext_hex = parts
    # An empty plaintext seals to an empty ciphertext, so only iv and tag must be non-empty.
    if not iv_hex or not tag_hex:
        raise FormatError("Invalid encrypted data format")
    if not all(_HEX_RE.match(part) for part in parts):
        raise FormatError("Envelope fields must be hex encoded")
    try:
        iv, tag, ciphertext = bytes.fromhex(iv_hex), bytes.fromhex(tag_hex), bytes.fromhex(ciphertext_hex)
    except ValueError as e:
        raise FormatError("Envelope fields must be hex encoded") from e
    # Fixed sizes keep bytes from shifting between the tag and ciphertext fields.
    if len(iv) != IV_BYTES or len(tag) != TAG_BYTES:
        raise FormatError("Invalid IV or authentication tag length")
    return iv, tag, ciphertext


def _warn_dev_secret() -> None:
    global _dev_secret_warned
    if not _dev_secret_warned:
        logger.warning("No APP_SECRET configured; using the development encryption secret")
        _dev_secret_warned = True
