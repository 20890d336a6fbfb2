# protected_core/config.py
from __future__ import annotations
from dataclasses import dataclass
import os

from .constants import BODY_FIELD


@dataclass
class CoreConfig:
    max_workers: int = 4
    body_field: str = BODY_FIELD


def body_field_default(config: dict | None = None) -> str:
    config = config or {}
    return config.get("body_field") or os.getenv("PROTECTED_CORE_BODY_FIELD", BODY_FIELD)


def load_config(config: dict | None = None) -> CoreConfig:
    """
    Resolve runtime settings.

    Explicit ``config`` entries win over environment variables:
        - PROTECTED_CORE_WORKERS     (decrypt pool size, default 4)
        - PROTECTED_CORE_BODY_FIELD  (default "body")

    Logging reads its own PROTECTED_CORE_LOG_* variables, see logger.py.
    """
    config = config or {}

    workers = config.get("max_workers") or os.getenv("PROTECTED_CORE_WORKERS", "4")
    try:
        max_workers = int(workers)
    except ValueError:
        raise ValueError(f"Invalid worker count: {workers!r}")
    if max_workers < 1:
        raise ValueError(f"Invalid worker count: {workers!r}")

    return CoreConfig(max_workers=max_workers, body_field=body_field_default(config))
