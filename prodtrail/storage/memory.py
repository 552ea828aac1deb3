"""In-process state store for tests and ephemeral runs."""

from __future__ import annotations

from prodtrail.storage.base import StateStore


class MemoryStateStore(StateStore):
    """Keeps blobs in a dict; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(initial or {})

    @property
    def store_name(self) -> str:
        return "memory"

    async def load_state(self, key: str) -> str | None:
        return self._blobs.get(key)

    async def save_state(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def snapshot(self) -> dict[str, str]:
        """Return a copy of every stored blob."""
        return dict(self._blobs)
