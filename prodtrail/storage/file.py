"""Directory-backed state store: one ``<key>.json`` file per key.

Each write goes to its own temporary sibling file followed by
``os.replace`` so a crash mid-write never leaves a truncated snapshot
behind and concurrent writers never share a temp path. Blocking file
I/O runs in a worker thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import re
import tempfile
from pathlib import Path

import structlog

from prodtrail.storage.base import StateStore

_log = structlog.get_logger(component="storage.file")

_KEY_RE = re.compile(r"^[A-Za-z0-9_-]+$")


class FileStateStore(StateStore):
    """Stores each key as a UTF-8 JSON file inside *directory*.

    Args:
        directory: Target directory; created on first save.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def store_name(self) -> str:
        return "file"

    @property
    def directory(self) -> Path:
        return self._directory

    async def load_state(self, key: str) -> str | None:
        path = self._path_for(key)
        return await asyncio.to_thread(_read_text, path)

    async def save_state(self, key: str, blob: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(_write_text_atomic, path, blob)
        _log.debug("state_saved", key=key, path=str(path), size=len(blob))

    def _path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid state key: {key!r}")
        return self._directory / f"{key}.json"


def _read_text(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def _write_text_atomic(path: Path, blob: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(blob)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise
