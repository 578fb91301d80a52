"""
Unit tests for key derivation and the envelope codec.
"""

import hashlib

import pytest

from estatechat.core.config import Settings
from estatechat.core.exceptions import DecryptionError
from estatechat.core.security import (
    DEFAULT_DEV_SECRET,
    decrypt_payload,
    derive_encryption_key,
    encrypt_payload,
)

HEX_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"


@pytest.fixture
def settings():
    return Settings(CHAT_ENCRYPTION_KEY="", APP_SECRET="unit-test-secret")


def _flip(hex_char: str) -> str:
    return "1" if hex_char == "0" else "0"


class TestKeyDerivation:
    """Tests for derive_encryption_key."""

    def test_hex_key_used_verbatim(self):
        settings = Settings(CHAT_ENCRYPTION_KEY=HEX_KEY, APP_SECRET="ignored")
        assert derive_encryption_key(settings) == bytes.fromhex(HEX_KEY)

    def test_app_secret_hashed_when_no_key(self, settings):
        expected = hashlib.sha256(b"unit-test-secret").digest()
        assert derive_encryption_key(settings) == expected

    def test_development_fallback(self):
        settings = Settings(CHAT_ENCRYPTION_KEY="", APP_SECRET="")
        expected = hashlib.sha256(DEFAULT_DEV_SECRET.encode("utf-8")).digest()
        assert derive_encryption_key(settings) == expected

    def test_wrong_length_key_falls_back_to_secret(self):
        settings = Settings(CHAT_ENCRYPTION_KEY="abcd", APP_SECRET="unit-test-secret")
        assert derive_encryption_key(settings) == hashlib.sha256(b"unit-test-secret").digest()

    def test_non_hex_key_falls_back_to_secret(self):
        settings = Settings(CHAT_ENCRYPTION_KEY="z" * 64, APP_SECRET="unit-test-secret")
        assert derive_encryption_key(settings) == hashlib.sha256(b"unit-test-secret").digest()

    def test_key_is_deterministic_and_256_bit(self, settings):
        first = derive_encryption_key(settings)
        second = derive_encryption_key(settings)
        assert first == second
        assert len(first) == 32


class TestEnvelopeCodec:
    """Tests for encrypt_payload / decrypt_payload."""

    @pytest.mark.parametrize(
        "plaintext",
        [
            "",
            "hello",
            '{"threads":[],"activeThreadId":null}',
            "Nyumba ya vyumba 3 Kilimani 🏡",
            "日本語のテキスト",
            "x" * 10_000,
        ],
    )
    def test_round_trip(self, settings, plaintext):
        assert decrypt_payload(encrypt_payload(plaintext, settings), settings) == plaintext

    def test_envelope_shape(self, settings):
        envelope = encrypt_payload("hello", settings)
        iv_hex, tag_hex, ciphertext_hex = envelope.split(":")
        assert len(iv_hex) == 32
        assert len(tag_hex) == 32
        assert len(ciphertext_hex) == len("hello") * 2
        int(iv_hex + tag_hex + ciphertext_hex, 16)

    def test_fresh_iv_per_encryption(self, settings):
        first = encrypt_payload("same text", settings)
        second = encrypt_payload("same text", settings)
        assert first.split(":")[0] != second.split(":")[0]
        assert first != second

    def test_tampered_tag_or_ciphertext_fails(self, settings):
        iv_hex, tag_hex, ciphertext_hex = encrypt_payload("sensitive", settings).split(":")

        for i in range(len(tag_hex)):
            tampered = tag_hex[:i] + _flip(tag_hex[i]) + tag_hex[i + 1:]
            with pytest.raises(DecryptionError):
                decrypt_payload(f"{iv_hex}:{tampered}:{ciphertext_hex}", settings)

        for i in range(len(ciphertext_hex)):
            tampered = ciphertext_hex[:i] + _flip(ciphertext_hex[i]) + ciphertext_hex[i + 1:]
            with pytest.raises(DecryptionError):
                decrypt_payload(f"{iv_hex}:{tag_hex}:{tampered}", settings)

    @pytest.mark.parametrize(
        "envelope",
        ["abc", "ab::cd", "ab:cd", "", ":ab:cd", "a:b:c:d", "zz:zz:zz", "ab:cd:ef"],
    )
    def test_malformed_envelope_fails(self, settings, envelope):
        with pytest.raises(DecryptionError):
            decrypt_payload(envelope, settings)

    def test_tag_bytes_shifted_into_ciphertext_fails(self, settings):
        iv_hex, tag_hex, ciphertext_hex = encrypt_payload("secret text", settings).split(":")

        shifted_left = f"{iv_hex}:{tag_hex[2:]}:{ciphertext_hex}{tag_hex[:2]}"
        shifted_right = f"{iv_hex}:{tag_hex}{ciphertext_hex[:2]}:{ciphertext_hex[2:]}"

        for envelope in (shifted_left, shifted_right):
            with pytest.raises(DecryptionError):
                decrypt_payload(envelope, settings)

    def test_short_iv_fails(self, settings):
        iv_hex, tag_hex, ciphertext_hex = encrypt_payload("secret text", settings).split(":")
        with pytest.raises(DecryptionError):
            decrypt_payload(f"{iv_hex[:24]}:{tag_hex}:{ciphertext_hex}", settings)

    def test_wrong_key_fails(self, settings):
        envelope = encrypt_payload("hello", settings)
        other = Settings(CHAT_ENCRYPTION_KEY=HEX_KEY)
        with pytest.raises(DecryptionError):
            decrypt_payload(envelope, other)

    def test_failure_causes_are_indistinguishable(self, settings):
        iv_hex, tag_hex, ciphertext_hex = encrypt_payload("hello", settings).split(":")
        tampered = f"{iv_hex}:{_flip(tag_hex[0]) + tag_hex[1:]}:{ciphertext_hex}"

        with pytest.raises(DecryptionError) as format_error:
            decrypt_payload("abc", settings)
        with pytest.raises(DecryptionError) as tamper_error:
            decrypt_payload(tampered, settings)

        assert str(format_error.value) == "Failed to decrypt data"
        assert str(tamper_error.value) == "Failed to decrypt data"
        assert type(format_error.value) is type(tamper_error.value) is DecryptionError
