"""Integration tests for loading, seeding and persisting the catalog.

Exercises ProductRepository.load against real file-backed storage and
verifies that a reload reproduces products and history exactly.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from pathlib import Path

import pytest

from prodtrail.catalog.repository import ProductRepository
from prodtrail.errors import StateDecodeError
from prodtrail.models.history import ChangeType
from prodtrail.storage import build_state_store
from prodtrail.storage.base import HISTORY_KEY, PRODUCTS_KEY
from prodtrail.storage.codec import encode_products
from prodtrail.storage.file import FileStateStore
from prodtrail.storage.memory import MemoryStateStore

# ---------------------------------------------------------------------------
# First run seeding
# ---------------------------------------------------------------------------


class TestSeeding:
    async def test_empty_store_is_seeded_and_persisted(self, file_store: FileStateStore, state_dir: Path) -> None:
        repo = await ProductRepository.load(file_store)

        assert [p.name for p in repo.products()] == ["Smartphone X", "Laptop Pro", "Wireless Headphones"]
        assert len(repo.audit_log) == 4
        assert (state_dir / "products.json").exists()
        assert (state_dir / "productHistory.json").exists()

    async def test_seeded_products_each_have_created_record(self, memory_store: MemoryStateStore) -> None:
        repo = await ProductRepository.load(memory_store)
        for product in repo.products():
            created = [r for r in repo.history(product.id) if r.change_type == ChangeType.CREATED]
            assert len(created) == 1
            assert created[0].changes["all"].before is None

    async def test_seeded_laptop_history_is_ordered(self, memory_store: MemoryStateStore) -> None:
        repo = await ProductRepository.load(memory_store)
        assert [r.id for r in repo.history("2")] == ["hist-3", "hist-2"]

    async def test_seeding_can_be_disabled(self, memory_store: MemoryStateStore) -> None:
        repo = await ProductRepository.load(memory_store, seed_on_empty=False)
        assert len(repo) == 0
        assert len(repo.audit_log) == 0
        assert memory_store.snapshot() == {}

    async def test_single_missing_key_is_read_as_empty(self, memory_store: MemoryStateStore) -> None:
        repo = await ProductRepository.load(memory_store)
        product_blob = encode_products(repo.products())
        store = MemoryStateStore({PRODUCTS_KEY: product_blob})

        reloaded = await ProductRepository.load(store)

        assert len(reloaded) == 3
        assert len(reloaded.audit_log) == 0


# ---------------------------------------------------------------------------
# Reload fidelity
# ---------------------------------------------------------------------------


class TestReload:
    async def test_mutations_survive_reload(self, file_store: FileStateStore, state_dir: Path, clock) -> None:
        repo = await ProductRepository.load(file_store, clock=clock)
        clock.advance()
        lamp = await repo.create({"name": "Lamp", "price": "12.50", "stock": 4}, actor="Riley")
        clock.advance()
        await repo.update(lamp.id, {"price": Decimal("14.25"), "stock": 3}, actor="Riley")
        clock.advance()
        await repo.delete("1", actor="Riley")

        reloaded = await ProductRepository.load(FileStateStore(state_dir))

        assert reloaded.products() == repo.products()
        assert reloaded.audit_log.entries() == repo.audit_log.entries()
        assert reloaded.read(lamp.id).price == Decimal("14.25")
        assert reloaded.history("1")[0].changes["status"].after == "deleted"

    async def test_reloaded_repository_keeps_appending(self, memory_store: MemoryStateStore, clock) -> None:
        repo = await ProductRepository.load(memory_store, clock=clock)
        reloaded = await ProductRepository.load(memory_store, clock=clock)
        clock.advance()

        await reloaded.update("3", {"stock": 90}, actor="Riley")

        history = reloaded.history("3")
        assert [r.change_type for r in history] == [ChangeType.STOCK_CHANGED, ChangeType.CREATED]
        assert len(reloaded.audit_log) == len(repo.audit_log) + 1

    async def test_high_precision_prices_survive_reload(self, memory_store: MemoryStateStore, clock) -> None:
        repo = await ProductRepository.load(memory_store, clock=clock)
        clock.advance()
        item = await repo.create({"name": "Vault", "price": Decimal("12345678901234567.89")}, actor="Riley")
        clock.advance()
        await repo.update(item.id, {"price": Decimal("98765432109876543.21")}, actor="Riley")

        reloaded = await ProductRepository.load(memory_store)

        assert reloaded.read(item.id).price == Decimal("98765432109876543.21")
        changed, created = reloaded.history(item.id)
        assert changed.changes["price"].before == Decimal("12345678901234567.89")
        assert changed.changes["price"].after == Decimal("98765432109876543.21")
        assert created.changes["all"].after["price"] == Decimal("12345678901234567.89")

    async def test_corrupt_snapshot_fails_load(self, file_store: FileStateStore, state_dir: Path) -> None:
        state_dir.mkdir(parents=True)
        (state_dir / "products.json").write_text("[{broken", encoding="utf-8")
        with pytest.raises(StateDecodeError) as exc_info:
            await ProductRepository.load(file_store)
        assert exc_info.value.key == PRODUCTS_KEY


# ---------------------------------------------------------------------------
# File store behaviour
# ---------------------------------------------------------------------------


class TestFileStateStore:
    async def test_missing_key_loads_none(self, file_store: FileStateStore) -> None:
        assert await file_store.load_state(HISTORY_KEY) is None

    async def test_save_replaces_whole_blob(self, file_store: FileStateStore, state_dir: Path) -> None:
        await file_store.save_state("products", "[1,2,3]")
        await file_store.save_state("products", "[]")
        assert await file_store.load_state("products") == "[]"
        assert [p.name for p in state_dir.iterdir()] == ["products.json"]

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "with space"])
    async def test_rejects_unsafe_keys(self, file_store: FileStateStore, key: str) -> None:
        with pytest.raises(ValueError):
            await file_store.save_state(key, "[]")


class _RecordingFileStore(FileStateStore):
    """File store that remembers every save error before re-raising it."""

    def __init__(self, directory: Path) -> None:
        super().__init__(directory)
        self.errors: list[Exception] = []

    async def save_state(self, key: str, blob: str) -> None:
        try:
            await super().save_state(key, blob)
        except Exception as exc:
            self.errors.append(exc)
            raise


class _SlowEarlySavesStore(MemoryStateStore):
    """Earlier saves take longer, so unordered writes would land stale data last."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    async def save_state(self, key: str, blob: str) -> None:
        self.calls += 1
        await asyncio.sleep(max(0.0, 0.04 - 0.002 * self.calls))
        await super().save_state(key, blob)


class TestConcurrentSaves:
    async def test_overlapping_creates_save_cleanly(self, state_dir: Path) -> None:
        store = _RecordingFileStore(state_dir)
        repo = await ProductRepository.load(store, seed_on_empty=False)

        created = await asyncio.gather(
            *(repo.create({"name": f"Item {n}", "stock": n}, actor="Riley") for n in range(40))
        )

        assert store.errors == []
        assert sorted(p.name for p in state_dir.iterdir()) == ["productHistory.json", "products.json"]
        reloaded = await ProductRepository.load(FileStateStore(state_dir))
        assert {p.id for p in reloaded.products()} == {p.id for p in created}
        assert len(reloaded.audit_log) == 40
        assert reloaded.audit_log.entries() == repo.audit_log.entries()

    async def test_last_save_carries_newest_state(self) -> None:
        store = _SlowEarlySavesStore()
        repo = await ProductRepository.load(store, seed_on_empty=False)

        await asyncio.gather(*(repo.create({"name": f"Item {n}"}, actor="Riley") for n in range(10)))

        reloaded = await ProductRepository.load(store)
        assert len(reloaded) == 10
        assert len(reloaded.audit_log) == 10


class TestBuildStateStore:
    def test_memory_backend(self) -> None:
        assert isinstance(build_state_store("memory", "ignored"), MemoryStateStore)

    def test_file_backend(self, tmp_path: Path) -> None:
        store = build_state_store("file", str(tmp_path))
        assert isinstance(store, FileStateStore)
        assert store.directory == tmp_path

    def test_unknown_backend(self) -> None:
        with pytest.raises(ValueError):
            build_state_store("s3", "bucket")
