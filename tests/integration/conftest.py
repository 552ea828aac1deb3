"""Shared fixtures for ProdTrail integration tests.

Provides file-backed and in-memory stores plus a manually advanced clock
so tests can exercise load -> mutate -> reload cycles end to end.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from prodtrail.storage.file import FileStateStore
from prodtrail.storage.memory import MemoryStateStore

_START = datetime(2026, 4, 1, 8, 0, 0, tzinfo=UTC)


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = _START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


@pytest.fixture
def file_store(state_dir: Path) -> FileStateStore:
    return FileStateStore(state_dir)


@pytest.fixture
def memory_store() -> MemoryStateStore:
    return MemoryStateStore()
