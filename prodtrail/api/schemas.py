"""Request and response models for the REST API.

Responses use the camelCase field names of the persisted documents.
Decimal values are exposed as JSON numbers.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from prodtrail.catalog.summary import InventorySummary, RecentChange
from prodtrail.models.history import ChangeRecord
from prodtrail.models.product import Product


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error: str
    detail: str


class ProductFields(BaseModel):
    """Writable product fields for create (POST) and partial update (PATCH).

    Only fields present in the request body are forwarded, so defaults
    here never overwrite stored values.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str = ""
    description: str = ""
    price: Decimal = Field(default=Decimal("0"), ge=0)
    category: str = ""
    stock: int = Field(default=0, ge=0)
    sku: str = ""
    image_url: str = Field(default="", alias="imageUrl")

    @field_validator("price", mode="before")
    @classmethod
    def float_price_via_str(cls, value: Any) -> Any:
        # Decimal(str(x)) keeps 19.99 from becoming 19.989999...
        if isinstance(value, float):
            return str(value)
        return value

    def supplied(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ProductOut(_CamelModel):
    id: str
    name: str
    description: str
    price: float
    category: str
    stock: int
    sku: str
    image_url: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> ProductOut:
        values = product.field_values()
        values["price"] = float(product.price)
        return cls(**values)


class FieldDeltaOut(BaseModel):
    before: Any = None
    after: Any = None


class ChangeRecordOut(_CamelModel):
    id: str
    product_id: str
    timestamp: datetime
    change_type: str
    change_label: str
    changes: dict[str, FieldDeltaOut]
    changed_by: str

    @classmethod
    def from_record(cls, record: ChangeRecord) -> ChangeRecordOut:
        return cls(
            id=record.id,
            product_id=record.product_id,
            timestamp=record.timestamp,
            change_type=record.change_type.value,
            change_label=record.change_type.label,
            changes={
                _camel(name): FieldDeltaOut(before=_plain(d.before), after=_plain(d.after))
                for name, d in record.changes.items()
            },
            changed_by=record.changed_by,
        )


class RecentChangeOut(_CamelModel):
    product_name: str
    record: ChangeRecordOut

    @classmethod
    def from_recent(cls, recent: RecentChange) -> RecentChangeOut:
        return cls(product_name=recent.product_name, record=ChangeRecordOut.from_record(recent.record))


class SummaryOut(_CamelModel):
    product_count: int
    history_count: int
    total_value: float
    recent: list[RecentChangeOut]

    @classmethod
    def from_summary(cls, summary: InventorySummary) -> SummaryOut:
        return cls(
            product_count=summary.product_count,
            history_count=summary.history_count,
            total_value=float(summary.total_value),
            recent=[RecentChangeOut.from_recent(r) for r in summary.recent],
        )


class HealthResponse(BaseModel):
    status: str
    version: str
    products: int
    history: int


def _plain(value: Any) -> Any:
    """Decimal -> float and snake_case keys -> camelCase, recursively."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, Mapping):
        return {_camel(k): _plain(v) for k, v in value.items()}
    return value
