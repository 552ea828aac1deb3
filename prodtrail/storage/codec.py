"""JSON encoding of the product and change-record snapshots.

Persisted documents use camelCase field names (``imageUrl``,
``productId``...). Decimals are written as JSON strings so prices keep
exact decimal values; numeric prices from older snapshots are still read
back through ``parse_float=Decimal``.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from prodtrail.errors import StateDecodeError
from prodtrail.models.history import ChangeRecord, ChangeType, FieldDelta, FieldValue
from prodtrail.models.product import Product

_TO_WIRE: dict[str, str] = {
    "image_url": "imageUrl",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}
_FROM_WIRE: dict[str, str] = {v: k for k, v in _TO_WIRE.items()}


def format_timestamp(value: datetime) -> str:
    """Render *value* as ISO-8601 UTC with a ``Z`` suffix."""
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_wire_name(name: str) -> str:
    return _TO_WIRE.get(name, name)


def from_wire_name(name: str) -> str:
    return _FROM_WIRE.get(name, name)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def product_to_dict(product: Product) -> dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "category": product.category,
        "stock": product.stock,
        "sku": product.sku,
        "imageUrl": product.image_url,
        "createdAt": format_timestamp(product.created_at),
        "updatedAt": format_timestamp(product.updated_at),
    }


def product_from_dict(data: dict[str, Any]) -> Product:
    return Product(
        id=str(data["id"]),
        name=data.get("name", ""),
        description=data.get("description", ""),
        price=Decimal(str(data.get("price", 0))),
        category=data.get("category", ""),
        stock=int(data.get("stock", 0)),
        sku=data.get("sku", ""),
        image_url=data.get("imageUrl", ""),
        created_at=parse_timestamp(data["createdAt"]),
        updated_at=parse_timestamp(data["updatedAt"]),
    )


def encode_products(products: Iterable[Product]) -> str:
    return _dumps([product_to_dict(p) for p in products])


def decode_products(blob: str, key: str = "products") -> list[Product]:
    try:
        return [product_from_dict(item) for item in _loads(blob)]
    except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
        raise StateDecodeError(key, exc) from exc


# ---------------------------------------------------------------------------
# Change records
# ---------------------------------------------------------------------------


def _value_to_wire(value: FieldValue) -> Any:
    if isinstance(value, Mapping):
        return {to_wire_name(k): _value_to_wire(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return format_timestamp(value)
    return value


def _value_from_wire(value: Any, name: str = "") -> FieldValue:
    if isinstance(value, dict):
        return {from_wire_name(k): _value_from_wire(v, k) for k, v in value.items()}
    if name == "price" and value is not None:
        return Decimal(str(value))
    return value


def record_to_dict(record: ChangeRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "productId": record.product_id,
        "timestamp": format_timestamp(record.timestamp),
        "changeType": record.change_type.value,
        "changes": {
            to_wire_name(name): {
                "before": _value_to_wire(delta.before),
                "after": _value_to_wire(delta.after),
            }
            for name, delta in record.changes.items()
        },
        "changedBy": record.changed_by,
    }


def record_from_dict(data: dict[str, Any]) -> ChangeRecord:
    return ChangeRecord(
        id=str(data.get("id", "")),
        product_id=str(data["productId"]),
        timestamp=parse_timestamp(data["timestamp"]),
        change_type=ChangeType(data["changeType"]),
        changes={
            from_wire_name(name): FieldDelta(
                before=_value_from_wire(delta.get("before"), name),
                after=_value_from_wire(delta.get("after"), name),
            )
            for name, delta in (data.get("changes") or {}).items()
        },
        changed_by=data.get("changedBy", ""),
    )


def encode_history(records: Iterable[ChangeRecord]) -> str:
    return _dumps([record_to_dict(r) for r in records])


def decode_history(blob: str, key: str = "productHistory") -> list[ChangeRecord]:
    try:
        return [record_from_dict(item) for item in _loads(blob)]
    except (ValueError, KeyError, TypeError, InvalidOperation) as exc:
        raise StateDecodeError(key, exc) from exc


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dumps(payload: list[dict[str, Any]]) -> str:
    return json.dumps(payload, default=_json_default, separators=(",", ":"))


def _loads(blob: str) -> list[dict[str, Any]]:
    data = json.loads(blob, parse_float=Decimal)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    return data
