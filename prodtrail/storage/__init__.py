"""Persistence adapters for ProdTrail.

Submodules:
    base    -- StateStore contract and the two snapshot keys.
    memory  -- In-process dict-backed store.
    file    -- Directory-of-JSON-files store with atomic replace.
    codec   -- JSON encoding of products and change records.
"""

from prodtrail.storage.base import HISTORY_KEY, PRODUCTS_KEY, StateStore
from prodtrail.storage.file import FileStateStore
from prodtrail.storage.memory import MemoryStateStore

__all__ = [
    "HISTORY_KEY",
    "PRODUCTS_KEY",
    "FileStateStore",
    "MemoryStateStore",
    "StateStore",
    "build_state_store",
]


def build_state_store(backend: str, path: str) -> StateStore:
    """Create the store named by *backend* (``memory`` or ``file``)."""
    if backend == "memory":
        return MemoryStateStore()
    if backend == "file":
        return FileStateStore(path)
    raise ValueError(f"Unknown storage backend: {backend}")
