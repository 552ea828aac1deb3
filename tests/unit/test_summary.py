"""Tests for the inventory summary and identity providers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from prodtrail.catalog.audit_log import AuditLog
from prodtrail.catalog.repository import ProductRepository
from prodtrail.catalog.seed import seed_history, seed_products
from prodtrail.catalog.summary import UNKNOWN_PRODUCT_NAME, summarize
from prodtrail.identity import StaticIdentityProvider
from prodtrail.storage.memory import MemoryStateStore


def _seeded() -> ProductRepository:
    products = seed_products()
    return ProductRepository(MemoryStateStore(), AuditLog(seed_history(products)), products)


class TestSummarize:
    def test_totals_for_seed_catalog(self) -> None:
        summary = summarize(_seeded())
        assert summary.product_count == 3
        assert summary.history_count == 4
        assert summary.total_value == Decimal("119998.20")

    def test_recent_is_limited_and_named(self) -> None:
        summary = summarize(_seeded(), recent_limit=2)
        assert [r.record.id for r in summary.recent] == ["hist-4", "hist-3"]
        assert [r.product_name for r in summary.recent] == ["Wireless Headphones", "Laptop Pro"]

    async def test_deleted_products_are_unknown(self) -> None:
        repo = _seeded()
        await repo.delete("1", actor="tester")
        summary = summarize(repo, recent_limit=10)
        assert summary.total_value == Decimal("69998.70")
        names = {r.record.product_id: r.product_name for r in summary.recent}
        assert names["1"] == UNKNOWN_PRODUCT_NAME

    def test_empty_catalog(self) -> None:
        summary = summarize(ProductRepository(MemoryStateStore()))
        assert summary.total_value == Decimal("0")
        assert summary.recent == []


class TestStaticIdentityProvider:
    def test_returns_configured_name(self) -> None:
        assert StaticIdentityProvider("Admin User").current_actor_name() == "Admin User"

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            StaticIdentityProvider("")
