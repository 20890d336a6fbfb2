"""
protected_core.utils
--------------------
Lightweight helpers for base64, ids and the single
boundary conversion used by ProtectedRecord.merge().
"""

from __future__ import annotations
import base64, binascii, uuid
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Union

from .errors import DecodeError

# mapping, (key, value) pairs, or a flat [key, value, ...] sequence
MergeData = Union[Mapping, Iterable[Any]]


def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode("ascii")

def b64d(s: str) -> bytes:
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as e:
        raise DecodeError(f"invalid base64 body: {e}") from e

def new_id() -> str:
    return uuid.uuid4().hex

def normalize_data(data: MergeData | None) -> Dict[str, Any]:
    """
    Turn merge input into a fresh dict.

    Accepts a mapping, a sequence of (key, value) pairs, or a flat
    [key, value, key, value, ...] sequence. Pairs are only assumed when
    every item is a 2-item tuple or list. The result is always a new dict,
    so callers may pop from it without touching the caller's object.
    """
    if data is None:
        return {}
    if isinstance(data, Mapping):
        return dict(data)
    if isinstance(data, (str, bytes)):
        raise TypeError("merge data must be a mapping or a key/value sequence")

    items = list(data)
    if items and all(isinstance(i, (tuple, list)) and len(i) == 2 for i in items):
        return {k: v for k, v in items}
    if len(items) % 2:
        raise TypeError(f"flat key/value sequence has odd length {len(items)}")
    it = iter(items)
    out: Dict[str, Any] = {}
    for k, v in zip(it, it):
        if not isinstance(k, str):
            raise TypeError(f"field name must be a string, got {k!r}")
        out[k] = v
    return out
