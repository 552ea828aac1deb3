"""Inventory summary: counts, stock value and the latest activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from prodtrail.catalog.repository import ProductRepository
from prodtrail.models.history import ChangeRecord

UNKNOWN_PRODUCT_NAME = "Unknown Product"


@dataclass(frozen=True)
class RecentChange:
    """A change record paired with the current name of its product."""

    record: ChangeRecord
    product_name: str


@dataclass(frozen=True)
class InventorySummary:
    product_count: int
    history_count: int
    total_value: Decimal
    recent: list[RecentChange] = field(default_factory=list)


def summarize(repository: ProductRepository, recent_limit: int = 5) -> InventorySummary:
    """Aggregate the live catalog and its audit log.

    ``total_value`` is the sum of ``price * stock`` over live products.
    Records of deleted products are labelled ``Unknown Product``.
    """
    products = repository.products()
    total = sum((p.price * p.stock for p in products), Decimal("0"))

    recent = []
    for record in repository.audit_log.recent(recent_limit):
        product = repository.get(record.product_id)
        name = product.name if product is not None else UNKNOWN_PRODUCT_NAME
        recent.append(RecentChange(record=record, product_name=name))

    return InventorySummary(
        product_count=len(products),
        history_count=len(repository.audit_log),
        total_value=total,
        recent=recent,
    )
