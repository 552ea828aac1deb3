"""ProdTrail: product catalog with an append-only change history."""

__version__ = "0.1.0"
