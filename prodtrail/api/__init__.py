"""REST API layer for ProdTrail.

Exposes:
    create_app -- FastAPI application factory.
"""

from prodtrail.api.app import create_app

__all__ = ["create_app"]
