"""Fernet encryption for assessment blobs at rest.

Readings, profiles and prediction payloads are serialized to compact JSON and
encrypted before they reach SQLite. Headline scores stay in plain columns.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when a value cannot be encrypted or decrypted."""


class FieldEncryptor:
    """Symmetric JSON-in, token-out encryption.

    ``None`` encrypts to the empty string and the empty string decrypts to
    ``None``, so optional columns round-trip unchanged.

    Usage::

        encryptor = FieldEncryptor(FieldEncryptor.generate_key())
        token = encryptor.encrypt({"heart_rate": 72})
        encryptor.decrypt(token)  # {"heart_rate": 72}
    """

    def __init__(self, key: str | bytes) -> None:
        """
        Raises:
            EncryptionError: If the key is empty or not a valid Fernet key.
        """
        raw = key.encode("utf-8") if isinstance(key, str) else key
        if not raw or not raw.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(raw)
        except (ValueError, TypeError) as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Serialize ``data`` to JSON and return a Fernet token string.

        Raises:
            EncryptionError: If ``data`` is not JSON-serializable.
        """
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Decrypt a token produced by :meth:`encrypt`.

        Raises:
            EncryptionError: On a tampered token, the wrong key, or bad JSON.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        try:
            return json.loads(plaintext)
        except ValueError as exc:
            raise EncryptionError(f"Decryption failed: {exc}") from exc

    @staticmethod
    def generate_key() -> str:
        """A new URL-safe base64 Fernet key."""
        return Fernet.generate_key().decode("utf-8")
