from __future__ import annotations

import itertools
import threading
from typing import List, Tuple

import pytest

from orchestrator import log
from ports import ComponentLoader, release_namespace

_COUNTER = itertools.count()


class RecordingSink:
    """Diagnostic sink that keeps every message for assertions."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def _record(self, level: str, msg: str) -> None:
        with self._lock:
            self.messages.append((level, msg))

    def status(self, msg: str) -> None:
        self._record("status", msg)

    def warn(self, msg: str) -> None:
        self._record("warn", msg)

    def error(self, msg: str) -> None:
        self._record("error", msg)

    def debug(self, msg: str) -> None:
        self._record("debug", msg)

    def text(self, level: str) -> str:
        with self._lock:
            return "\n".join(msg for lvl, msg in self.messages if lvl == level)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def namespace() -> str:
    name = f"test_plugins_{next(_COUNTER)}"
    yield name
    release_namespace(name)


@pytest.fixture
def loader(tmp_path, namespace) -> ComponentLoader:
    return ComponentLoader(tmp_path / "plugins", namespace)


@pytest.fixture(autouse=True)
def _journal_off():
    log.disable()
    yield
    log.disable()
