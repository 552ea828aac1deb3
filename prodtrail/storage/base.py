"""Persistence adapter contract.

The core treats the adapter as a best-effort cache of the in-memory
source of truth: it reads each key once at startup and writes whole
snapshots after every successful mutation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

PRODUCTS_KEY = "products"
HISTORY_KEY = "productHistory"


class StateStore(ABC):
    """Opaque key -> serialized blob durability store."""

    @property
    @abstractmethod
    def store_name(self) -> str:
        """Identifier used in logs."""

    @abstractmethod
    async def load_state(self, key: str) -> str | None:
        """Return the blob stored under *key*, or None if absent."""

    @abstractmethod
    async def save_state(self, key: str, blob: str) -> None:
        """Replace the blob stored under *key*."""
