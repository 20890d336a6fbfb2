# protected_core/executor.py
"""
Shared background pool for decrypt+parse+merge tasks.

Records use this pool unless one is injected at construction time.
"""
from __future__ import annotations
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional
import threading

from .config import load_config
from .logger import get_logger

log = get_logger("Protected.Executor")

_lock = threading.Lock()
_executor: Optional[ThreadPoolExecutor] = None


def get_executor(config: dict | None = None) -> Executor:
    global _executor
    with _lock:
        if _executor is None:
            cfg = load_config(config)
            _executor = ThreadPoolExecutor(
                max_workers=cfg.max_workers,
                thread_name_prefix="protected-decrypt",
            )
            log.info(f"[EXECUTOR] started workers={cfg.max_workers}")
        return _executor


def shutdown_executor(wait: bool = True) -> None:
    global _executor
    with _lock:
        if _executor is not None:
            _executor.shutdown(wait=wait)
            _executor = None
            log.info("[EXECUTOR] stopped")
