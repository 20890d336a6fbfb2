# protected_core/records.py
"""
Concrete protected record types and their key lookup strategies.
"""
from __future__ import annotations
from typing import Any, Optional

from .keys import KeyDirectory, KeyEntry
from .protected import ProtectedRecord


class Board(ProtectedRecord):
    """
    A board's key is stored under its own id, or is shared through the
    space that contains it.
    """
    public_fields = ("id", "space_id", "user_id")
    private_fields = frozenset({"title"})

    def find_key(self, directory: Any) -> Optional[bytes]:
        keys = KeyDirectory.from_value(directory)
        return keys.find(self.id) or keys.find(self.get("space_id"), kind="space")


class Note(ProtectedRecord):
    """
    Notes look for their own key first, then fall back to the board and
    space they belong to.
    """
    public_fields = ("id", "space_id", "board_id", "user_id", "has_file", "mod")
    private_fields = frozenset({"title", "text", "tags", "url", "username", "password"})

    def find_key(self, directory: Any) -> Optional[bytes]:
        keys = KeyDirectory.from_value(directory)
        return (
            keys.find(self.id)
            or keys.find(self.get("board_id"), kind="board")
            or keys.find(self.get("space_id"), kind="space")
        )


class KeychainEntry(ProtectedRecord):
    """
    Local keychain rows. They come from the plaintext cache, so they are
    raw by default and never go through the decrypt pipeline.
    """
    public_fields = ("id", "type", "item_id", "user_id")
    private_fields = frozenset({"k"})

    def __init__(self, data=None, raw: bool = True, **kwargs):
        super().__init__(data, raw=raw, **kwargs)

    def to_key_entry(self) -> KeyEntry:
        return KeyEntry(item_id=self.get("item_id"), key_b64=self.get("k"), kind=self.get("type", "item"))
