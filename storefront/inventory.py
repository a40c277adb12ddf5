# storefront/inventory.py
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from . import repository
from .catalog import primary_image_url, stock_status
from .database import get_session
from .schemas import DashboardOut, DashboardProduct, InventoryStats, ProductOut

router = APIRouter(prefix="/api/inventory", tags=["inventory"])


def _threshold(request: Request, threshold: Optional[int]) -> int:
    if threshold is not None:
        return threshold
    return request.app.state.settings.low_stock_threshold


def _dashboard_row(product, threshold: int) -> DashboardProduct:
    data = ProductOut.model_validate(product).model_dump()
    return DashboardProduct(
        **data,
        stock_status=stock_status(product.inventory, threshold),
        primary_image_url=primary_image_url(product),
    )


@router.get("/low-stock", response_model=List[ProductOut])
async def low_stock(
    request: Request,
    threshold: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
):
    return await repository.get_low_stock_products(session, _threshold(request, threshold))


@router.get("/stats", response_model=InventoryStats)
async def stats(
    request: Request,
    threshold: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
):
    return await repository.get_inventory_stats(session, _threshold(request, threshold))


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard(
    request: Request,
    threshold: Optional[int] = None,
    session: AsyncSession = Depends(get_session),
):
    """Everything the inventory dashboard shows, read fresh on every request."""
    limit = _threshold(request, threshold)
    # one session, one statement at a time
    products = await repository.list_products(session)
    summary = await repository.get_inventory_stats(session, limit)
    low = await repository.get_low_stock_products(session, limit)

    return DashboardOut(
        threshold=limit,
        generated_at=datetime.now(timezone.utc),
        stats=summary,
        low_stock=[_dashboard_row(p, limit) for p in low],
        products=[_dashboard_row(p, limit) for p in products],
    )
