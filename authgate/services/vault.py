import base64
import binascii
import logging
import os

import bcrypt
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from authgate.config import settings
from authgate.errors import DecryptionError
from authgate.services.generator import normalize_backup_code

LOGGER = logging.getLogger(__name__)

_NONCE_SIZE = 12
_TAG_SIZE = 16
_KEY_SIZE = 32


def _decode_key(raw: str) -> bytes:
    try:
        key = base64.b64decode(raw, validate=True)
    except binascii.Error as exc:
        raise ValueError("TOTP_ENCRYPTION_KEY must be base64-encoded") from exc
    if len(key) != _KEY_SIZE:
        raise ValueError("TOTP_ENCRYPTION_KEY must be 32 bytes (base64-encoded)")
    return key


class SecretVault:
    def __init__(self, encryption_key: str, bcrypt_rounds: int = 10) -> None:
        self._aesgcm = AESGCM(_decode_key(encryption_key)) if encryption_key else None
        self._bcrypt_rounds = bcrypt_rounds

    def ensure_configured(self) -> None:
        if self._aesgcm is None:
            raise RuntimeError("TOTP_ENCRYPTION_KEY not set")

    def encrypt(self, plaintext: str) -> str:
        self.ensure_configured()
        nonce = os.urandom(_NONCE_SIZE)
        sealed = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, blob: str) -> str:
        self.ensure_configured()
        try:
            raw = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError, TypeError) as exc:
            raise DecryptionError("Encrypted secret is not valid base64") from exc
        if len(raw) < _NONCE_SIZE + _TAG_SIZE:
            raise DecryptionError("Encrypted secret is truncated")
        nonce, sealed = raw[:_NONCE_SIZE], raw[_NONCE_SIZE:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, sealed, None)
        except InvalidTag as exc:
            raise DecryptionError("Encrypted secret failed authentication") from exc
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecryptionError("Encrypted secret is not text") from exc

    def hash_backup_code(self, code: str) -> str:
        salt = bcrypt.gensalt(rounds=self._bcrypt_rounds)
        normalized = normalize_backup_code(code)
        return bcrypt.hashpw(normalized.encode("utf-8"), salt).decode("utf-8")

    def hash_backup_codes(self, codes: list[str]) -> list[str]:
        return [self.hash_backup_code(code) for code in codes]

    def verify_backup_code_hash(self, code: str, hashed: str) -> bool:
        normalized = normalize_backup_code(code)
        if not normalized:
            return False
        try:
            return bcrypt.checkpw(normalized.encode("utf-8"), hashed.encode("utf-8"))
        except (TypeError, ValueError):
            LOGGER.warning("Skipping malformed backup code hash")
            return False


vault = SecretVault(settings.totp_encryption_key, settings.bcrypt_rounds)
