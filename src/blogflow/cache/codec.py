"""Reversible transforms applied to serialized cache entries.

Compression is gzip followed by base64. Encryption is Fernet (AES-128-CBC
with HMAC-SHA256) under a key derived from the configured passphrase with
PBKDF2. Both are best-effort: a failing transform logs a warning and passes
the text through unchanged.
"""

from __future__ import annotations

import base64
import binascii
import gzip

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from blogflow.logging import get_logger

logger = get_logger(__name__)

_KDF_SALT = b"blogflow_result_cache"
_KDF_ITERATIONS = 100_000


def derive_fernet_key(passphrase: str) -> bytes:
    """Derive a Fernet key from a passphrase.

    The salt is fixed so that the same passphrase reads entries written by
    an earlier process.
    """

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=_KDF_SALT,
        iterations=_KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(passphrase.encode()))


def compress_text(text: str) -> str:
    return base64.b64encode(gzip.compress(text.encode("utf-8"))).decode("ascii")


def decompress_text(text: str) -> str:
    return gzip.decompress(base64.b64decode(text.encode("ascii"), validate=True)).decode("utf-8")


class EntryCodec:
    """Encode/decode pipeline for one cache configuration.

    Encoding compresses then encrypts; decoding reverses the order.
    """

    def __init__(self, *, compression: bool = False, encryption_key: str | None = None) -> None:
        self.compression = compression
        self._cipher = Fernet(derive_fernet_key(encryption_key)) if encryption_key else None

    @property
    def encrypted(self) -> bool:
        return self._cipher is not None

    def encode(self, text: str) -> str:
        if self.compression:
            try:
                text = compress_text(text)
            except (UnicodeError, ValueError) as e:
                logger.warning("Compression failed, storing uncompressed: %s", e)
        if self._cipher is not None:
            try:
                text = self._cipher.encrypt(text.encode("utf-8")).decode("ascii")
            except (UnicodeError, ValueError) as e:
                logger.warning("Encryption failed, storing plaintext: %s", e)
        return text

    def decode(self, text: str) -> str:
        if self._cipher is not None:
            try:
                text = self._cipher.decrypt(text.encode("utf-8")).decode("utf-8")
            except (InvalidToken, UnicodeError, ValueError) as e:
                logger.warning("Decryption failed, reading raw entry: %s", type(e).__name__)
        if self.compression:
            try:
                text = decompress_text(text)
            except (binascii.Error, OSError, EOFError, UnicodeError, ValueError) as e:
                logger.warning("Decompression failed, reading raw entry: %s", e)
        return text
