# tests/conftest.py
from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from envboot.logging import reset_logging


_ENV_VARS = (
    "NODE_ENV",
    "ENV",
    "ENVBOOT_CONFIG",
    "ENVBOOT_DEFAULT_ENV",
    "ENVBOOT_RECORD_KEY",
    "ENVBOOT_STORE_DIR",
    "ENVBOOT_LOG_DIR",
    "ENVBOOT_LOG_LEVEL",
    "ENVBOOT_FORKED_WORKER",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Every test starts without environment overrides."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # dotenv writes os.environ directly
    for name in _ENV_VARS:
        os.environ.pop(name, None)
    reset_logging()


# -------------------------
# Fakes
# -------------------------

class FakeStore:
    """
    Configuration store double.

    load() returns (or raises) whatever was configured; writes are recorded.
    """
    def __init__(self, loaded: Any = None, load_error: Optional[BaseException] = None):
        self.loaded = loaded
        self.load_error = load_error
        self.calls: List[Tuple[str, Any]] = []

    def load(self, key: str) -> Any:
        self.calls.append(("load", key))
        if self.load_error is not None:
            raise self.load_error
        return self.loaded

    def create(self, record) -> Any:
        self.calls.append(("create", record))
        return record

    def update(self, record) -> Any:
        self.calls.append(("update", record))
        return record

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def writes(self, name: str) -> list:
        return [arg for n, arg in self.calls if n == name]


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def make_host():
    """Build a duck-typed host like the one the resolver binds to."""
    def _make(
        configuration: Any = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> SimpleNamespace:
        return SimpleNamespace(
            config={} if config is None else config,
            configuration=configuration if configuration is not None else FakeStore(),
            logger=MagicMock(),
        )
    return _make


@pytest.fixture
def valid_runtime_document() -> Dict[str, Any]:
    return {
        "filepath": "content/config/process/runtime.json",
        "config": {"process": {"environment": "dev"}},
        "_id": "TESTVALIDID",
        "meta": {
            "revision": 0,
            "created": 1494338785207,
            "version": 0,
            "updated": 1494340295729,
        },
        "$loki": 1,
    }
