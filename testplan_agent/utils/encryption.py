"""
At-rest encryption for stored credentials.

Tokens have the form ``<ivHex>:<cipherHex>`` (AES-256-CBC, PKCS7 padding).
Every call to ``encrypt`` draws a new IV, so the same secret never produces
the same token twice. The key is derived with scrypt from ``ENCRYPTION_KEY``
once per process and only lives in memory.
"""

import logging
import os
from functools import lru_cache

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from ..config import settings

logger = logging.getLogger("testplan.error")

KEY_SALT = b"salt"
IV_BYTES = 16


@lru_cache(maxsize=None)
def _derive_key(passphrase: str) -> bytes:
    kdf = Scrypt(salt=KEY_SALT, length=32, n=2**14, r=8, p=1)
    return kdf.derive(passphrase.encode("utf-8"))


def _key() -> bytes:
    return _derive_key(settings.ENCRYPTION_KEY)


def encrypt(text: str) -> str:
    """Encrypt a secret for storage; empty input gives an empty token"""
    if not text:
        return ""

    iv = os.urandom(IV_BYTES)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(text.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_key()), modes.CBC(iv)).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()

    return f"{iv.hex()}:{encrypted.hex()}"


def decrypt(token: str) -> str:
    """
    Decrypt a stored token.

    Empty tokens and tokens without the ``:`` delimiter decrypt to ``""``.
    Tokens that cannot be decoded (bad hex, wrong key) also give ``""``.
    """
    if not token or ":" not in token:
        return ""

    iv_hex, encrypted_hex = token.split(":", 1)
    try:
        iv = bytes.fromhex(iv_hex)
        encrypted = bytes.fromhex(encrypted_hex)

        decryptor = Cipher(algorithms.AES(_key()), modes.CBC(iv)).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()

        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except ValueError as e:
        logger.error(f"Failed to decrypt stored secret: {e}")
        return ""
