"""Change history data structures and enumerations."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from types import MappingProxyType
from typing import Any

# Closed set of values a delta may carry: number, text, null or a
# structured snapshot (used by ``created`` records).
FieldValue = Decimal | int | str | None | Mapping[str, Any]

CREATED_DELTA_KEY = "all"
STATUS_DELTA_KEY = "status"


class ChangeType(StrEnum):
    """Classification of a single change record."""

    CREATED = "created"
    UPDATED = "updated"
    PRICE_CHANGED = "price_changed"
    STOCK_CHANGED = "stock_changed"
    IMAGE_UPDATED = "image_updated"

    @property
    def label(self) -> str:
        """Human-readable label used by listings and summaries."""
        return _LABELS[self]


_LABELS: dict[ChangeType, str] = {
    ChangeType.CREATED: "Created",
    ChangeType.UPDATED: "Updated",
    ChangeType.PRICE_CHANGED: "Price Changed",
    ChangeType.STOCK_CHANGED: "Stock Updated",
    ChangeType.IMAGE_UPDATED: "Image Updated",
}


def _frozen(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _frozen(v) for k, v in value.items()})
    return value


@dataclass(frozen=True)
class FieldDelta:
    """Before/after pair for one field.

    Snapshot values are copied into read-only mappings.
    """

    before: FieldValue
    after: FieldValue

    def __post_init__(self) -> None:
        object.__setattr__(self, "before", _frozen(self.before))
        object.__setattr__(self, "after", _frozen(self.after))


@dataclass(frozen=True)
class ChangeRecord:
    """Immutable audit entry capturing one state transition of a product.

    ``product_id`` is a back-reference only; the record outlives the
    product it describes. An empty ``id`` is filled in by AuditLog.append.
    ``changes`` is copied into a read-only mapping on construction.
    """

    product_id: str
    timestamp: datetime
    change_type: ChangeType
    changed_by: str
    changes: Mapping[str, FieldDelta] = field(default_factory=dict)
    id: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "changes", MappingProxyType(dict(self.changes)))
