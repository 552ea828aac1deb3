"""Product data structures."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

# Fields a caller may supply on create/update. id and both timestamps
# belong to the repository.
EDITABLE_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "price",
    "category",
    "stock",
    "sku",
    "image_url",
)


@dataclass(frozen=True)
class Product:
    """Canonical current state of a catalog entry.

    Owned exclusively by the ProductRepository. Instances are immutable;
    an update produces a new Product via ``dataclasses.replace``.
    """

    id: str
    name: str
    description: str
    price: Decimal
    category: str
    stock: int
    sku: str
    image_url: str
    created_at: datetime
    updated_at: datetime

    def field_values(self) -> dict[str, Any]:
        """Return every field as a plain dict (timestamps stay datetimes)."""
        return asdict(self)
