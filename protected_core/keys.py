# protected_core/keys.py
"""
Key directory handed to ProtectedRecord.find_key().

Incoming data may carry a ``keys`` list describing which key material is
available and what it unlocks. Each entry names the item it belongs to and
its kind (item, board, space, ...).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Protocol, Union, runtime_checkable

from .utils import b64d


@dataclass
class KeyEntry:
    item_id: str
    key_b64: str
    kind: str = "item"   # item | board | space

    @property
    def key(self) -> bytes:
        return b64d(self.key_b64)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KeyEntry":
        return cls(
            item_id=data["item_id"],
            key_b64=data["key"],
            kind=data.get("kind", "item"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"item_id": self.item_id, "key": self.key_b64, "kind": self.kind}


class KeyDirectory:
    def __init__(self, entries: Iterable[Union[KeyEntry, Dict[str, Any]]] = ()):
        self.entries: List[KeyEntry] = [
            e if isinstance(e, KeyEntry) else KeyEntry.from_dict(e) for e in entries
        ]

    @classmethod
    def from_value(cls, value: Any) -> "KeyDirectory":
        """Accepts a KeyDirectory, a list of entries, or None."""
        if isinstance(value, KeyDirectory):
            return value
        if value is None:
            return cls()
        return cls(value)

    def find(self, item_id: Optional[str], kind: Optional[str] = None) -> Optional[bytes]:
        if not item_id:
            return None
        rec = next(
            (e for e in self.entries if e.item_id == item_id and (kind is None or e.kind == kind)),
            None,
        )
        return rec.key if rec else None

    def __len__(self) -> int:
        return len(self.entries)


@runtime_checkable
class KeyResolver(Protocol):
    def find_key(self, directory: Any) -> Optional[bytes]:
        ...
