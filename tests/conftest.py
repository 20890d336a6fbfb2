import os
from concurrent.futures import Executor, Future

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from protected_core.constants import CRYPTO_VERSION
from protected_core.utils import b64e


class InlineExecutor(Executor):
    """Runs submitted work on the calling thread."""

    def __init__(self):
        self.calls = 0

    def submit(self, fn, *args, **kwargs):
        self.calls += 1
        f = Future()
        try:
            f.set_result(fn(*args, **kwargs))
        except Exception as e:
            f.set_exception(e)
        return f


def seal_current(key: bytes, plaintext: bytes) -> str:
    version = bytes([CRYPTO_VERSION])
    nonce = os.urandom(12)
    ct = AESGCM(key).encrypt(nonce, plaintext, version)
    return b64e(version + nonce + ct)


def seal_legacy(key: bytes, plaintext: bytes, iv: bytes = None) -> str:
    iv = iv or os.urandom(16)
    padder = padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    enc = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ct = enc.update(padded) + enc.finalize()
    return b64e(ct) + ":i" + iv.hex()


@pytest.fixture
def inline_executor():
    return InlineExecutor()


@pytest.fixture
def key():
    return AESGCM.generate_key(bit_length=256)
