"""Product repository: canonical current state plus its audit trail.

Every mutation follows the same sequence:

1. await the configured latency (the only suspension point before commit)
2. build the candidate snapshot and diff it against the stored product
3. append exactly one ChangeRecord and store the new snapshot, with no
   await in between so the pair is never partially visible
4. persist both collections as whole snapshots (best effort)

Saves are serialized by a single lock so snapshots reach the store in
commit order. Mutations themselves are not locked: callers issuing
overlapping mutations against the same product id must serialize them
externally.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

import structlog

from prodtrail.catalog.audit_log import AuditLog
from prodtrail.catalog.diff import diff_product, initial_snapshot
from prodtrail.catalog.seed import seed_history, seed_products
from prodtrail.errors import InvalidFieldError, ProductNotFoundError
from prodtrail.models.history import (
    CREATED_DELTA_KEY,
    STATUS_DELTA_KEY,
    ChangeRecord,
    ChangeType,
    FieldDelta,
)
from prodtrail.models.product import EDITABLE_FIELDS, Product
from prodtrail.storage.base import HISTORY_KEY, PRODUCTS_KEY, StateStore
from prodtrail.storage.codec import (
    decode_history,
    decode_products,
    encode_history,
    encode_products,
)

_log = structlog.get_logger(component="catalog.repository")

_DEFAULTS: dict[str, Any] = {
    "name": "",
    "description": "",
    "price": Decimal("0"),
    "category": "",
    "stock": 0,
    "sku": "",
    "image_url": "",
}

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def new_product_id() -> str:
    return f"prod-{uuid4().hex}"


class ProductRepository:
    """Owns the live product collection and drives the audit log.

    Args:
        store:             Persistence adapter written after every mutation.
        audit_log:         History collection; a fresh one when omitted.
        products:          Initial live products (insertion order is kept).
        mutation_delay_ms: Artificial latency awaited by every mutation.
        clock:             Source of "now"; defaults to UTC wall clock.
    """

    def __init__(
        self,
        store: StateStore,
        audit_log: AuditLog | None = None,
        products: Iterable[Product] = (),
        mutation_delay_ms: int = 0,
        clock: Clock = _utc_now,
    ) -> None:
        self._store = store
        self._audit_log = audit_log if audit_log is not None else AuditLog()
        self._products: dict[str, Product] = {p.id: p for p in products}
        self._delay = max(mutation_delay_ms, 0) / 1000
        self._clock = clock
        self._persist_lock = asyncio.Lock()

    @classmethod
    async def load(
        cls,
        store: StateStore,
        *,
        seed_on_empty: bool = True,
        mutation_delay_ms: int = 0,
        clock: Clock = _utc_now,
    ) -> ProductRepository:
        """Build a repository from *store*, seeding it on first run.

        Seeding happens only when neither key holds a snapshot; a single
        missing key is read as an empty collection.

        Raises:
            StateDecodeError: a stored snapshot is not valid.
        """
        products_blob = await store.load_state(PRODUCTS_KEY)
        history_blob = await store.load_state(HISTORY_KEY)

        if products_blob is None and history_blob is None and seed_on_empty:
            products = seed_products()
            repo = cls(
                store,
                AuditLog(seed_history(products)),
                products,
                mutation_delay_ms=mutation_delay_ms,
                clock=clock,
            )
            _log.info("catalog_seeded", products=len(products), history=len(repo.audit_log))
            await repo._persist()
            return repo

        products = decode_products(products_blob, PRODUCTS_KEY) if products_blob is not None else []
        records = decode_history(history_blob, HISTORY_KEY) if history_blob is not None else []
        repo = cls(
            store,
            AuditLog(records),
            products,
            mutation_delay_ms=mutation_delay_ms,
            clock=clock,
        )
        _log.info("catalog_loaded", store=store.store_name, products=len(products), history=len(records))
        return repo

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def audit_log(self) -> AuditLog:
        return self._audit_log

    def products(self) -> list[Product]:
        """Return all live products in insertion order."""
        return list(self._products.values())

    def get(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def read(self, product_id: str) -> Product:
        """Return the product or raise ProductNotFoundError."""
        product = self._products.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def history(self, product_id: str) -> list[ChangeRecord]:
        """Return the product's change records, most recent first.

        Works for deleted products too; their history is retained.
        """
        return self._audit_log.query(product_id)

    def __len__(self) -> int:
        return len(self._products)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, data: Mapping[str, Any], *, actor: str) -> Product:
        """Create a product from *data* and record a ``created`` entry."""
        await self._simulate_latency()
        fields = _normalise(data)

        now = self._clock()
        product = Product(
            id=self._fresh_id(),
            created_at=now,
            updated_at=now,
            **{**_DEFAULTS, **fields},
        )
        record = ChangeRecord(
            product_id=product.id,
            timestamp=now,
            change_type=ChangeType.CREATED,
            changes={CREATED_DELTA_KEY: FieldDelta(before=None, after=initial_snapshot(product))},
            changed_by=actor,
        )

        stored = self._audit_log.append(record)
        self._products[product.id] = product

        _log.info("product_created", product_id=product.id, record_id=stored.id, actor=actor)
        await self._persist()
        return product

    async def update(self, product_id: str, updates: Mapping[str, Any], *, actor: str) -> Product:
        """Merge *updates* onto the stored product and record the diff.

        ``updated_at`` always advances and one record is always appended,
        even when no supplied value differs from the stored one.

        Raises:
            ProductNotFoundError: *product_id* is not in the repository.
            InvalidFieldError:    *updates* names a non-editable field.
        """
        await self._simulate_latency()
        old = self.read(product_id)
        fields = _normalise(updates)

        changes, change_type = diff_product(old, fields)
        now = self._stamp_after(old.updated_at)
        product = dataclasses.replace(old, **fields, updated_at=now)
        record = ChangeRecord(
            product_id=product_id,
            timestamp=now,
            change_type=change_type,
            changes=changes,
            changed_by=actor,
        )

        stored = self._audit_log.append(record)
        self._products[product_id] = product

        _log.info(
            "product_updated",
            product_id=product_id,
            record_id=stored.id,
            change_type=change_type.value,
            changed_fields=list(changes),
            actor=actor,
        )
        await self._persist()
        return product

    async def delete(self, product_id: str, *, actor: str) -> None:
        """Remove the product and append a status ``active -> deleted`` record.

        Raises:
            ProductNotFoundError: *product_id* is not in the repository.
        """
        await self._simulate_latency()
        old = self.read(product_id)

        record = ChangeRecord(
            product_id=product_id,
            timestamp=self._stamp_after(old.updated_at),
            change_type=ChangeType.UPDATED,
            changes={STATUS_DELTA_KEY: FieldDelta(before="active", after="deleted")},
            changed_by=actor,
        )

        stored = self._audit_log.append(record)
        del self._products[product_id]

        _log.info("product_deleted", product_id=product_id, record_id=stored.id, actor=actor)
        await self._persist()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _simulate_latency(self) -> None:
        if self._delay:
            await asyncio.sleep(self._delay)

    def _stamp_after(self, previous: datetime) -> datetime:
        """Current time, never earlier than *previous*."""
        return max(self._clock(), previous)

    def _fresh_id(self) -> str:
        product_id = new_product_id()
        while product_id in self._products:
            product_id = new_product_id()
        return product_id

    async def _persist(self) -> None:
        """Write both collections as whole snapshots; failures only warn.

        Snapshots are encoded under the lock, so whichever save runs last
        also carries the newest state.
        """
        async with self._persist_lock:
            blobs = (
                (PRODUCTS_KEY, encode_products(self._products.values())),
                (HISTORY_KEY, encode_history(self._audit_log.entries())),
            )
            for key, blob in blobs:
                try:
                    await self._store.save_state(key, blob)
                except Exception as exc:  # noqa: BLE001
                    _log.warning(
                        "persistence_save_failed",
                        store=self._store.store_name,
                        key=key,
                        error=str(exc),
                    )


def _normalise(data: Mapping[str, Any]) -> dict[str, Any]:
    """Reject non-editable field names and coerce ``price`` to Decimal."""
    rejected = [key for key in data if key not in EDITABLE_FIELDS]
    if rejected:
        raise InvalidFieldError(rejected)
    fields = dict(data)
    if "price" in fields and not isinstance(fields["price"], Decimal):
        fields["price"] = Decimal(str(fields["price"]))
    return fields
