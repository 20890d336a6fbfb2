import logging

import pytest

from protected_core.config import load_config
from protected_core.executor import get_executor, shutdown_executor
from protected_core.logger import get_logger
from protected_core.protected import ProtectedRecord
from protected_core.utils import normalize_data


def test_load_config_defaults(monkeypatch):
    for var in ("PROTECTED_CORE_WORKERS", "PROTECTED_CORE_BODY_FIELD"):
        monkeypatch.delenv(var, raising=False)
    cfg = load_config()
    assert cfg.max_workers == 4
    assert cfg.body_field == "body"


def test_load_config_env_and_overrides(monkeypatch):
    monkeypatch.setenv("PROTECTED_CORE_WORKERS", "2")
    assert load_config().max_workers == 2
    assert load_config({"max_workers": 8}).max_workers == 8


def test_invalid_worker_count(monkeypatch):
    monkeypatch.setenv("PROTECTED_CORE_WORKERS", "many")
    with pytest.raises(ValueError):
        load_config()
    with pytest.raises(ValueError):
        load_config({"max_workers": -1})


def test_body_field_from_env(monkeypatch):
    monkeypatch.setenv("PROTECTED_CORE_BODY_FIELD", "payload")
    assert ProtectedRecord().body_field_name == "payload"
    assert ProtectedRecord(body_field="body").body_field_name == "body"


def test_bad_worker_count_only_fails_the_pool(monkeypatch):
    monkeypatch.delenv("PROTECTED_CORE_BODY_FIELD", raising=False)
    monkeypatch.delenv("PROTECTED_CORE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("PROTECTED_CORE_WORKERS", "many")
    rec = ProtectedRecord({"id": "n1"}, raw=True)
    assert rec.body_field_name == "body"
    assert get_logger("Protected.Test.Workers").level == logging.INFO
    shutdown_executor()
    with pytest.raises(ValueError):
        get_executor()


def test_logger_level_from_env(monkeypatch):
    monkeypatch.setenv("PROTECTED_CORE_LOG_LEVEL", "debug")
    assert get_logger("Protected.Test.Level").level == logging.DEBUG


def test_shared_executor_lifecycle():
    shutdown_executor()
    pool = get_executor({"max_workers": 1})
    assert get_executor() is pool
    assert pool.submit(lambda: 41 + 1).result(timeout=5) == 42
    shutdown_executor()
    assert get_executor() is not pool
    shutdown_executor()


def test_logger_writes_to_file(tmp_path):
    path = tmp_path / "logs" / "protected.log"
    log = get_logger("Protected.Test.File", level=logging.INFO, to_file=str(path))
    log.info("hello file")
    for h in log.handlers:
        h.flush()
    assert "hello file" in path.read_text()


def test_normalize_data():
    assert normalize_data(None) == {}
    assert normalize_data({"a": 1}) == {"a": 1}
    assert normalize_data([("a", 1), ("b", 2)]) == {"a": 1, "b": 2}
    with pytest.raises(TypeError):
        normalize_data("ab")
    with pytest.raises(TypeError):
        normalize_data([("a", 1, 2)])


def test_normalize_flat_sequence():
    assert normalize_data(["id", "n1"]) == {"id": "n1"}
    assert normalize_data(["id", "n1", "tags", ("a", "b")]) == {"id": "n1", "tags": ("a", "b")}
    assert normalize_data([]) == {}
    with pytest.raises(TypeError):
        normalize_data(["id", "n1", "body"])
    with pytest.raises(TypeError):
        normalize_data([1, "n1"])
