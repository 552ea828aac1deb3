"""Product catalog core.

Submodules:
    diff        -- Field-level diff and change-type classification.
    audit_log   -- Append-only, time-ordered change record collection.
    repository  -- Canonical product state; runs diff + audit on every mutation.
    seed        -- Default catalog for first runs.
    summary     -- Inventory counts, stock value and recent activity.
"""

from prodtrail.catalog.audit_log import AuditLog
from prodtrail.catalog.diff import classify_changes, diff_product
from prodtrail.catalog.repository import ProductRepository
from prodtrail.catalog.summary import InventorySummary, summarize

__all__ = [
    "AuditLog",
    "InventorySummary",
    "ProductRepository",
    "classify_changes",
    "diff_product",
    "summarize",
]
