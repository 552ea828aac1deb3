"""Default catalog used when no persisted state exists on first run."""

from __future__ import annotations

import dataclasses
from datetime import UTC, datetime
from decimal import Decimal

from prodtrail.catalog.diff import initial_snapshot
from prodtrail.models.history import CREATED_DELTA_KEY, ChangeRecord, ChangeType, FieldDelta
from prodtrail.models.product import Product

SEED_ACTOR = "Admin User"

_PLACEHOLDER = "https://placehold.co/300x300/e4e4e7/6366f1?text={}&font=open-sans"


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=UTC)


def seed_products() -> list[Product]:
    return [
        Product(
            id="1",
            name="Smartphone X",
            description="Latest flagship smartphone with advanced features",
            price=Decimal("999.99"),
            category="Electronics",
            stock=50,
            sku="PHONE-X-001",
            image_url=_PLACEHOLDER.format("Smartphone+X"),
            created_at=_ts("2023-05-15T10:30:00"),
            updated_at=_ts("2023-05-15T10:30:00"),
        ),
        Product(
            id="2",
            name="Laptop Pro",
            description="High-performance laptop for professionals",
            price=Decimal("1499.99"),
            category="Electronics",
            stock=30,
            sku="LAPTOP-PRO-002",
            image_url=_PLACEHOLDER.format("Laptop+Pro"),
            created_at=_ts("2023-06-10T14:45:00"),
            updated_at=_ts("2023-06-20T09:15:00"),
        ),
        Product(
            id="3",
            name="Wireless Headphones",
            description="Premium noise-cancelling wireless headphones",
            price=Decimal("249.99"),
            category="Audio",
            stock=100,
            sku="AUDIO-HP-003",
            image_url=_PLACEHOLDER.format("Headphones"),
            created_at=_ts("2023-07-05T11:20:00"),
            updated_at=_ts("2023-07-05T11:20:00"),
        ),
    ]


def seed_history(products: list[Product]) -> list[ChangeRecord]:
    """Build ``created`` records for *products* plus the one seeded price change.

    Laptop Pro was repriced after creation, so its ``created`` snapshot
    carries the original price and a later ``price_changed`` record
    brings it to the current value.
    """
    by_id = {p.id: p for p in products}
    laptop = by_id["2"]
    laptop_at_creation = dataclasses.replace(
        laptop,
        price=Decimal("1399.99"),
        updated_at=laptop.created_at,
    )
    return [
        _created("hist-1", by_id["1"]),
        _created("hist-2", laptop_at_creation),
        ChangeRecord(
            id="hist-3",
            product_id=laptop.id,
            timestamp=laptop.updated_at,
            change_type=ChangeType.PRICE_CHANGED,
            changes={"price": FieldDelta(before=Decimal("1399.99"), after=laptop.price)},
            changed_by=SEED_ACTOR,
        ),
        _created("hist-4", by_id["3"]),
    ]


def _created(record_id: str, product: Product) -> ChangeRecord:
    return ChangeRecord(
        id=record_id,
        product_id=product.id,
        timestamp=product.created_at,
        change_type=ChangeType.CREATED,
        changes={CREATED_DELTA_KEY: FieldDelta(before=None, after=initial_snapshot(product))},
        changed_by=SEED_ACTOR,
    )
