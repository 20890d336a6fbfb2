"""
protected_core.protected
------------------------
ProtectedRecord: a Model that keeps one field ("body") as ciphertext.

Flow for ``record.set(data)``:

    strip body -> merge the rest synchronously -> resolve key
        -> decode (legacy text blob or base64)
        -> [background] decrypt -> parse JSON -> merge parsed fields back
        -> resolve the returned Future with the parsed object

Missing body and missing key are not errors: nothing is launched and the
ciphertext stays on the record until decrypt_pending() succeeds.
"""

from __future__ import annotations
from concurrent.futures import Executor, Future
from functools import partial
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple
import json

from .config import body_field_default
from .constants import ID_FIELD, KEYS_FIELD
from .crypto import decrypt, detect_and_decode, is_legacy
from .errors import DecodeError, DecryptError, ParseError, ProtectedError
from .executor import get_executor
from .logger import get_logger
from .model import Model
from .utils import MergeData, normalize_data

log = get_logger("Protected.Record")


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of the background decrypt step, carried as a value."""
    plaintext: Optional[bytes] = None
    error: Optional[DecryptError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_decrypt(key: bytes, data: bytes, legacy: Optional[bool] = None) -> DecryptResult:
    try:
        return DecryptResult(plaintext=decrypt(key, data, legacy=legacy))
    except DecryptError as e:
        return DecryptResult(error=e)
    except Exception as e:
        err = DecryptError(f"decrypt failed: {e}")
        err.__cause__ = e
        return DecryptResult(error=err)


def parse_plaintext(plaintext: bytes) -> Dict[str, Any]:
    try:
        obj = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"body plaintext is not valid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise ParseError(f"body plaintext must be a JSON object, got {type(obj).__name__}")
    return obj


class ProtectedRecord(Model):
    body_field_name: Optional[str] = None
    public_fields: Tuple[str, ...] = (ID_FIELD,)
    private_fields: FrozenSet[str] = frozenset()

    def __init__(
        self,
        data: MergeData | None = None,
        raw: bool = False,
        body_field: Optional[str] = None,
        key: Optional[bytes] = None,
        executor: Optional[Executor] = None,
        public_fields: Optional[Iterable[str]] = None,
        private_fields: Optional[Iterable[str]] = None,
    ):
        self.raw_mode = raw
        self.body_field_name = body_field or type(self).body_field_name or body_field_default()
        self.key = key
        self.pending_body: Optional[str] = None
        self._executor = executor

        public = tuple(public_fields) if public_fields is not None else type(self).public_fields
        if ID_FIELD not in public:
            public = (ID_FIELD,) + public
        self.public_fields = public
        self.private_fields = frozenset(private_fields) if private_fields is not None else type(self).private_fields

        super().__init__(data)

    # ------------------------------------------------------------------
    # Key resolution
    # ------------------------------------------------------------------
    def find_key(self, directory: Any) -> Optional[bytes]:
        """Look up this record's key in ``directory``. Override per record type."""
        return None

    def ensure_key(self, context_data: MergeData | None = None) -> Optional[bytes]:
        with self.lock:
            if self.key is not None:
                return self.key
            directory = normalize_data(context_data).get(KEYS_FIELD)
            try:
                found = self.find_key(directory)
            except (ProtectedError, KeyError, TypeError, ValueError) as e:
                # malformed key material counts as no key
                log.warning(f"[KEY] key lookup failed for {self!r}: {e}")
                return None
            if found is None:
                return None
            self.key = found
            log.debug(f"[KEY] resolved key for {self!r}")
            return found

    def clear_key(self) -> None:
        with self.lock:
            self.key = None

    # ------------------------------------------------------------------
    # Decrypt pipeline
    # ------------------------------------------------------------------
    def process_body(self, data: MergeData) -> Optional[Future]:
        mapping = normalize_data(data)
        body = mapping.get(self.body_field_name)
        if not isinstance(body, str):
            return None

        key = self.ensure_key(mapping)
        if key is None:
            log.debug(f"[BODY] no key for {self!r}, decryption deferred")
            return None

        future: Future = Future()
        try:
            raw = detect_and_decode(body)
        except DecodeError as e:
            log.warning(f"[BODY] decode failed for {self!r}: {e}")
            future.set_exception(e)
            return future

        executor = self._executor or get_executor()
        try:
            executor.submit(self._finish_body, future, key, body, raw, is_legacy(body))
        except RuntimeError as e:
            # executor already shut down
            log.warning(f"[BODY] could not schedule decrypt for {self!r}: {e}")
            future.set_exception(e)
        return future

    def _finish_body(self, future: Future, key: bytes, body: str, raw: bytes, legacy: bool) -> None:
        # Runs on the executor; every outcome ends up on ``future``.
        result = run_decrypt(key, raw, legacy)
        if not result.ok:
            log.warning(f"[BODY] decrypt failed for {self!r}: {result.error}")
            future.set_exception(result.error)
            return

        try:
            obj = parse_plaintext(result.plaintext)
            with self.lock:
                self.merge_generic(obj)
                if self.body_field_name not in obj and self.fields.get(self.body_field_name) == body:
                    self.unset(self.body_field_name)
                if self.pending_body == body:
                    self.pending_body = None
        except Exception as e:
            log.warning(f"[BODY] merge failed for {self!r}: {e}")
            future.set_exception(e)
            return

        log.debug(f"[BODY] decrypted {len(obj)} field(s) into {self!r}")
        future.set_result(obj)

    def decrypt_pending(self, context_data: MergeData | None = None) -> Optional[Future]:
        """Retry a body that was kept as ciphertext because no key was available."""
        with self.lock:
            body = self.pending_body
            keys = self.fields.get(KEYS_FIELD)
        if body is None:
            return None
        data = normalize_data(context_data)
        data.setdefault(KEYS_FIELD, keys)
        data[self.body_field_name] = body
        return self.process_body(data)

    # ------------------------------------------------------------------
    # Merge override
    # ------------------------------------------------------------------
    def set(self, data: MergeData) -> Optional[Future]:
        if self.raw_mode:
            self.merge_generic(data)
            return None

        mapping = normalize_data(data)
        has_body = self.body_field_name in mapping
        body = mapping.pop(self.body_field_name, None)
        self.merge_generic(mapping)
        if not has_body:
            return None

        mapping[self.body_field_name] = body
        try:
            future = self.process_body(mapping)
        except Exception:
            self._keep_body(body)
            raise

        if future is None:
            # nothing launched: keep the body as given
            self._keep_body(body)
            return None

        self._supersede_pending(body)
        future.add_done_callback(partial(self._restore_if_aborted, body))
        return future

    def _keep_body(self, body: Any) -> None:
        with self.lock:
            self.merge_generic({self.body_field_name: body})
            self.pending_body = body if isinstance(body, str) else None

    def _supersede_pending(self, body: str) -> None:
        # a newer body replaces any ciphertext still waiting for a key
        with self.lock:
            stale = self.pending_body
            if stale is None or stale == body:
                return
            if self.fields.get(self.body_field_name) == stale:
                self.unset(self.body_field_name)
            self.pending_body = None

    def _restore_if_aborted(self, body: str, future: Future) -> None:
        # Decode/decrypt/parse failures are final. Anything else (executor
        # shut down, listener errors) leaves the ciphertext on the record.
        err = future.exception()
        if err is not None and not isinstance(err, ProtectedError):
            self._keep_body(body)

    merge = set

    # ------------------------------------------------------------------
    # Field views
    # ------------------------------------------------------------------
    def public_data(self) -> Dict[str, Any]:
        with self.lock:
            return {k: self.fields[k] for k in self.public_fields if k in self.fields}

    def private_data(self) -> Dict[str, Any]:
        with self.lock:
            return {k: v for k, v in self.fields.items() if k in self.private_fields}
