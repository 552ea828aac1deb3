"""Integration tests for the application bootstrap (without the REST server)."""

from __future__ import annotations

from pathlib import Path

import pytest

from prodtrail.app import ProdTrailApp, _ComponentError
from prodtrail.models.config import (
    IdentityConfig,
    ProdTrailConfig,
    RepositoryConfig,
    StorageConfig,
)


def _config(backend: str = "memory", path: str = "", seed: bool = True) -> ProdTrailConfig:
    return ProdTrailConfig(
        storage=StorageConfig(backend=backend, path=path),
        repository=RepositoryConfig(seed_on_empty=seed),
        identity=IdentityConfig(default_actor="Bootstrap Tester"),
    )


class TestBootstrap:
    async def test_start_wires_seeded_repository(self) -> None:
        app = ProdTrailApp(_config())
        await app.start(serve_rest=False)
        try:
            assert app.repository is not None
            assert len(app.repository) == 3
            assert app.identity is not None
            assert app.identity.current_actor_name() == "Bootstrap Tester"
        finally:
            await app.stop()

    async def test_restart_on_file_backend_keeps_changes(self, tmp_path: Path) -> None:
        first = ProdTrailApp(_config("file", str(tmp_path)))
        await first.start(serve_rest=False)
        assert first.repository is not None
        await first.repository.delete("2", actor="Bootstrap Tester")
        await first.stop()

        second = ProdTrailApp(_config("file", str(tmp_path)))
        await second.start(serve_rest=False)
        try:
            assert second.repository is not None
            assert second.repository.get("2") is None
            assert len(second.repository.history("2")) == 3
        finally:
            await second.stop()

    async def test_corrupt_state_is_a_component_error(self, tmp_path: Path) -> None:
        (tmp_path / "productHistory.json").write_text("not json", encoding="utf-8")
        app = ProdTrailApp(_config("file", str(tmp_path)))
        with pytest.raises(_ComponentError) as exc_info:
            await app.start(serve_rest=False)
        assert exc_info.value.component == "repository"
        await app.stop()

    async def test_stop_without_start_is_safe(self) -> None:
        await ProdTrailApp(_config()).stop()
