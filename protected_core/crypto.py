"""
protected_core.crypto
---------------------
Body codec and symmetric decryption for protected records.

- detect_and_decode(): classifies a body string as legacy (text blob ending in
  ":i" + hex IV) or current (base64) and returns the raw bytes
- decrypt(): AES-GCM for current versioned payloads, AES-CBC/PKCS7 for
  legacy blobs

Encryption is deliberately not provided here.
"""

from __future__ import annotations
from typing import Optional
import re

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .constants import (
    LEGACY_DELIMITER, LEGACY_IV_HEX_LEN, LEGACY_TEXT_ENCODING,
    CRYPTO_VERSION, GCM_NONCE_LEN,
)
from .errors import DecodeError, DecryptError
from .logger import get_logger
from .utils import b64d

log = get_logger("Protected.Crypto")

LEGACY_MARKER = re.compile(re.escape(LEGACY_DELIMITER) + r"[0-9a-fA-F]{%d}\Z" % LEGACY_IV_HEX_LEN)
_LEGACY_MARKER_BYTES = re.compile(LEGACY_MARKER.pattern.encode("ascii"))

AES_KEY_SIZES = (16, 24, 32)


# --------- Format detection ----------
def is_legacy(body: str) -> bool:
    return LEGACY_MARKER.search(body) is not None

def detect_and_decode(body: str) -> bytes:
    """Return the raw bytes behind an encoded body string."""
    if is_legacy(body):
        try:
            return body.encode(LEGACY_TEXT_ENCODING)
        except UnicodeEncodeError as e:
            raise DecodeError(f"legacy body is not {LEGACY_TEXT_ENCODING} text") from e
    return b64d(body)


# --------- Decryption ----------
def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)) or len(key) not in AES_KEY_SIZES:
        raise DecryptError("key must be 16, 24 or 32 bytes")

def decrypt_legacy(key: bytes, data: bytes) -> bytes:
    if _LEGACY_MARKER_BYTES.search(data) is None:
        raise DecryptError("legacy payload is missing its IV marker")
    text = data.decode(LEGACY_TEXT_ENCODING)
    ct_b64, iv_hex = text.rsplit(LEGACY_DELIMITER, 1)
    try:
        ciphertext = b64d(ct_b64)
    except DecodeError as e:
        raise DecryptError("legacy ciphertext is corrupted") from e
    iv = bytes.fromhex(iv_hex)
    if not ciphertext or len(ciphertext) % (algorithms.AES.block_size // 8):
        raise DecryptError("legacy ciphertext is not block aligned")

    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as e:
        raise DecryptError("legacy padding check failed (wrong key?)") from e

def decrypt_current(key: bytes, data: bytes) -> bytes:
    header = 1 + GCM_NONCE_LEN
    if len(data) <= header:
        raise DecryptError("payload too short")
    version = data[0]
    if version != CRYPTO_VERSION:
        raise DecryptError(f"unsupported payload version: {version}")
    nonce = data[1:header]
    try:
        return AESGCM(key).decrypt(nonce, data[header:], data[:1])
    except InvalidTag as e:
        raise DecryptError("authentication failed (wrong key or corrupted payload)") from e

def decrypt(key: bytes, data: bytes, legacy: Optional[bool] = None) -> bytes:
    """
    Decrypt bytes produced by detect_and_decode().

    ``legacy`` may be passed when the caller already knows the format;
    otherwise it is sniffed from the trailing IV marker.
    """
    _check_key(key)
    if legacy is None:
        legacy = _LEGACY_MARKER_BYTES.search(data) is not None
    if legacy:
        log.debug("[CRYPTO] legacy CBC payload")
        return decrypt_legacy(bytes(key), data)
    return decrypt_current(bytes(key), data)
