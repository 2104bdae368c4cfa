"""Encryption of OAuth tokens at rest.

Fernet with a key derived from INTEGRATION_ENCRYPTION_KEY, falling back to
SECRET_KEY. Values carry an ``enc:`` prefix so plain-text rows written before
encryption was enabled remain readable.
"""

from __future__ import annotations

import base64
import os
from functools import lru_cache

import structlog
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from invplatform.core.config import settings

logger = structlog.get_logger()

_PREFIX = "enc:"


@lru_cache(maxsize=1)
def _get_fernet() -> Fernet:
    raw_key = os.environ.get("INTEGRATION_ENCRYPTION_KEY") or settings.SECRET_KEY
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=b"invplatform-integration-tokens-v1",
        iterations=100_000,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(raw_key.encode("utf-8"))))


def encrypt_token(plaintext: str | None) -> str | None:
    if plaintext is None:
        return None
    return _PREFIX + _get_fernet().encrypt(plaintext.encode("utf-8")).decode("utf-8")


def decrypt_token(ciphertext: str | None) -> str | None:
    if ciphertext is None:
        return None
    if not ciphertext.startswith(_PREFIX):
        return ciphertext
    try:
        return _get_fernet().decrypt(ciphertext[len(_PREFIX):].encode("utf-8")).decode("utf-8")
    except InvalidToken:
        logger.error("token_decryption_failed")
        raise
