"""Field-level diff between a stored product and a proposed update.

The engine is a pure function: it never touches the repository or the
audit log and is total over well-typed inputs.

Classification walks a fixed precedence list. Each tracked field that
changed overrides the classification chosen by the fields before it, so
when price, stock and image all change the record is ``image_updated``.
Every differing field is still reported in the delta map.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from prodtrail.models.history import ChangeType, FieldDelta
from prodtrail.models.product import Product
from prodtrail.storage.codec import format_timestamp

# Evaluated in order; later matches override earlier ones.
_CLASSIFICATION_ORDER: tuple[tuple[str, ChangeType], ...] = (
    ("price", ChangeType.PRICE_CHANGED),
    ("stock", ChangeType.STOCK_CHANGED),
    ("image_url", ChangeType.IMAGE_UPDATED),
)


def diff_product(
    old: Product,
    updates: Mapping[str, Any],
) -> tuple[dict[str, FieldDelta], ChangeType]:
    """Compare *updates* against *old* and classify the change.

    Only keys present in *updates* are considered, and only those whose
    value differs (by equality, not key presence) appear in the result.

    Returns:
        (changes, change_type) where changes preserves the key order of
        *updates*.
    """
    current = old.field_values()
    changes: dict[str, FieldDelta] = {}
    for key, new_value in updates.items():
        old_value = current.get(key)
        if old_value != new_value:
            changes[key] = FieldDelta(before=old_value, after=new_value)

    return changes, classify_changes(changes)


def classify_changes(changes: Mapping[str, FieldDelta]) -> ChangeType:
    """Pick the change type for a delta map using the fixed precedence."""
    change_type = ChangeType.UPDATED
    for field_name, candidate in _CLASSIFICATION_ORDER:
        if field_name in changes:
            change_type = candidate
    return change_type


def initial_snapshot(product: Product) -> dict[str, Any]:
    """Full field set recorded as the ``after`` side of a ``created`` record.

    Timestamps are rendered as ISO-8601 strings so the snapshot survives a
    persistence round trip unchanged.
    """
    snapshot = product.field_values()
    snapshot["created_at"] = format_timestamp(product.created_at)
    snapshot["updated_at"] = format_timestamp(product.updated_at)
    return snapshot
