"""REST routes for products, history and the inventory summary."""

from __future__ import annotations

from fastapi import APIRouter, Header, Query, Request, Response

from prodtrail.api.schemas import (
    ChangeRecordOut,
    HealthResponse,
    ProductFields,
    ProductOut,
    SummaryOut,
)
from prodtrail.catalog.repository import ProductRepository
from prodtrail.catalog.summary import summarize

router = APIRouter()


def _repository(request: Request) -> ProductRepository:
    return request.app.state.repository


def _actor(request: Request, x_actor: str | None) -> str:
    """Header attribution wins; otherwise ask the identity provider."""
    if x_actor and x_actor.strip():
        return x_actor.strip()
    return request.app.state.identity.current_actor_name()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    from prodtrail import __version__

    repo = _repository(request)
    return HealthResponse(
        status="ok",
        version=__version__,
        products=len(repo),
        history=len(repo.audit_log),
    )


@router.get("/products", response_model=list[ProductOut])
async def list_products(request: Request) -> list[ProductOut]:
    return [ProductOut.from_product(p) for p in _repository(request).products()]


@router.post("/products", status_code=201, response_model=ProductOut)
async def create_product(
    request: Request,
    body: ProductFields,
    x_actor: str | None = Header(default=None),
) -> ProductOut:
    product = await _repository(request).create(body.supplied(), actor=_actor(request, x_actor))
    return ProductOut.from_product(product)


@router.get("/products/{product_id}", response_model=ProductOut)
async def read_product(request: Request, product_id: str) -> ProductOut:
    return ProductOut.from_product(_repository(request).read(product_id))


@router.patch("/products/{product_id}", response_model=ProductOut)
async def update_product(
    request: Request,
    product_id: str,
    body: ProductFields,
    x_actor: str | None = Header(default=None),
) -> ProductOut:
    product = await _repository(request).update(
        product_id,
        body.supplied(),
        actor=_actor(request, x_actor),
    )
    return ProductOut.from_product(product)


@router.delete("/products/{product_id}", status_code=204)
async def delete_product(
    request: Request,
    product_id: str,
    x_actor: str | None = Header(default=None),
) -> Response:
    await _repository(request).delete(product_id, actor=_actor(request, x_actor))
    return Response(status_code=204)


@router.get("/products/{product_id}/history", response_model=list[ChangeRecordOut])
async def product_history(request: Request, product_id: str) -> list[ChangeRecordOut]:
    """History survives deletion, so unknown ids yield an empty list, not 404."""
    return [ChangeRecordOut.from_record(r) for r in _repository(request).history(product_id)]


@router.get("/history", response_model=list[ChangeRecordOut])
async def recent_history(
    request: Request,
    limit: int = Query(default=5, ge=1, le=500),
) -> list[ChangeRecordOut]:
    return [ChangeRecordOut.from_record(r) for r in _repository(request).audit_log.recent(limit)]


@router.get("/summary", response_model=SummaryOut)
async def inventory_summary(
    request: Request,
    recent: int = Query(default=5, ge=0, le=100),
) -> SummaryOut:
    return SummaryOut.from_summary(summarize(_repository(request), recent_limit=recent))
