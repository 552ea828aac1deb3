"""Exception hierarchy for ProdTrail."""

from __future__ import annotations


class ProdTrailError(Exception):
    """Base class for all ProdTrail errors."""


class ProductNotFoundError(ProdTrailError, KeyError):
    """Raised when an update/delete/read targets an id absent from the repository."""

    def __init__(self, product_id: str) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class InvalidFieldError(ProdTrailError, ValueError):
    """Raised when a payload names an unknown or repository-owned field."""

    def __init__(self, field_names: list[str]) -> None:
        super().__init__(f"Fields cannot be written: {', '.join(sorted(field_names))}")
        self.field_names = sorted(field_names)


class StateDecodeError(ProdTrailError):
    """Raised when a persisted snapshot cannot be decoded at startup."""

    def __init__(self, key: str, cause: Exception) -> None:
        super().__init__(f"Persisted state '{key}' is unreadable: {cause}")
        self.key = key
        self.cause = cause
