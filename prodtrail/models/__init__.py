"""Core data structures for ProdTrail."""

from prodtrail.models.config import ProdTrailConfig
from prodtrail.models.history import (
    ChangeRecord,
    ChangeType,
    FieldDelta,
    FieldValue,
)
from prodtrail.models.product import EDITABLE_FIELDS, Product

__all__ = [
    "EDITABLE_FIELDS",
    "ChangeRecord",
    "ChangeType",
    "FieldDelta",
    "FieldValue",
    "ProdTrailConfig",
    "Product",
]
