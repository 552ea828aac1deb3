"""Append-only audit log of product change records.

Records are never modified or removed once appended, including after the
product they reference has been deleted. There is no retention policy:
the log is the permanent record for the lifetime of the process.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator
from uuid import uuid4

import structlog

from prodtrail.models.history import ChangeRecord

_log = structlog.get_logger(component="catalog.audit_log")

_DEFAULT_RECENT_LIMIT = 5


def new_record_id() -> str:
    return f"hist-{uuid4().hex}"


class AuditLog:
    """Time-ordered collection of ChangeRecords, queryable by product id.

    Internally an append-ordered list plus a per-product index of list
    positions. Queries sort by timestamp descending; Python's sort is
    stable, so equal timestamps keep append order.
    """

    def __init__(self, records: Iterable[ChangeRecord] = ()) -> None:
        self._records: list[ChangeRecord] = []
        self._by_product: dict[str, list[int]] = {}
        self._ids: set[str] = set()
        for record in records:
            self.append(record)

    def append(self, entry: ChangeRecord) -> ChangeRecord:
        """Store *entry*, assigning a fresh id when it has none.

        Returns the stored record (which differs from *entry* only when an
        id was assigned).
        """
        if not entry.id:
            entry = dataclasses.replace(entry, id=self._fresh_id())
        elif entry.id in self._ids:
            raise ValueError(f"Duplicate change record id: {entry.id}")

        self._by_product.setdefault(entry.product_id, []).append(len(self._records))
        self._records.append(entry)
        self._ids.add(entry.id)
        _log.debug(
            "change_record_appended",
            record_id=entry.id,
            product_id=entry.product_id,
            change_type=entry.change_type.value,
        )
        return entry

    def query(self, product_id: str) -> list[ChangeRecord]:
        """Return every record for *product_id*, most recent first."""
        positions = self._by_product.get(product_id, [])
        records = [self._records[i] for i in positions]
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    def recent(self, limit: int = _DEFAULT_RECENT_LIMIT) -> list[ChangeRecord]:
        """Return the *limit* most recent records across all products."""
        if limit <= 0:
            return []
        return sorted(self._records, key=lambda r: r.timestamp, reverse=True)[:limit]

    def entries(self) -> list[ChangeRecord]:
        """Return all records in append order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ChangeRecord]:
        return iter(list(self._records))

    def _fresh_id(self) -> str:
        record_id = new_record_id()
        while record_id in self._ids:
            record_id = new_record_id()
        return record_id
