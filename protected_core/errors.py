# protected_core/errors.py
"""
Errors surfaced by the decrypt pipeline.

All three are terminal for a merge attempt and reach callers only through
the future returned by ProtectedRecord.process_body().
"""


class ProtectedError(Exception):
    pass


class DecodeError(ProtectedError):
    """Body string is neither a legacy blob nor valid base64."""


class DecryptError(ProtectedError):
    """Wrong key, corrupted ciphertext or failed authentication."""


class ParseError(ProtectedError):
    """Plaintext is not a JSON object."""
