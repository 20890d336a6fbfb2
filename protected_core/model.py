# protected_core/model.py
"""
Generic mutable record.

Plain field storage with an identity field and a change listener hook.
ProtectedRecord builds on merge_generic(); nothing here knows about
encryption.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional
import threading

from .constants import ID_FIELD
from .utils import MergeData, new_id, normalize_data

Listener = Callable[["Model", Dict[str, Any]], None]


class Model:
    def __init__(self, data: MergeData | None = None):
        self.cid = new_id()          # local handle, never serialized
        self.fields: Dict[str, Any] = {}
        self.lock = threading.RLock()
        self._listeners: List[Listener] = []
        if data is not None:
            self.set(data)

    @property
    def id(self) -> Optional[str]:
        return self.fields.get(ID_FIELD)

    def get(self, name: str, default: Any = None) -> Any:
        with self.lock:
            return self.fields.get(name, default)

    def has(self, name: str) -> bool:
        with self.lock:
            return name in self.fields

    def merge_generic(self, data: MergeData) -> Dict[str, Any]:
        """Assign every field in ``data`` and notify listeners of the changes."""
        mapping = normalize_data(data)
        with self.lock:
            changed = {k: v for k, v in mapping.items() if self.fields.get(k, _MISSING) != v}
            self.fields.update(mapping)
        if changed:
            for fn in list(self._listeners):
                fn(self, changed)
        return changed

    def set(self, data: MergeData) -> Any:
        self.merge_generic(data)

    def unset(self, name: str) -> None:
        with self.lock:
            self.fields.pop(name, None)

    def on_change(self, fn: Listener) -> None:
        self._listeners.append(fn)

    def to_dict(self) -> Dict[str, Any]:
        with self.lock:
            return dict(self.fields)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r}>"


_MISSING = object()
