# storefront/repository.py
"""Product data access.

Every function takes the request's ``AsyncSession`` as its first argument and
issues a single statement. Absence is reported as ``None``, never raised.
"""
import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import SlugConflictError, UnknownFieldError
from .models import Product
from .schemas import InventoryStats

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 30

# field name -> column. Update keys are checked against this before any SQL is built.
UPDATABLE_COLUMNS = {
    "name": Product.name,
    "description": Product.description,
    "price": Product.price,
    "category": Product.category,
    "inventory": Product.inventory,
    "image_urls": Product.image_urls,
    "image_public_ids": Product.image_public_ids,
}

CREATE_FIELDS = ("name", "slug", "description", "price", "category", "inventory", "image_urls", "image_public_ids")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == "23505"
    return "UNIQUE constraint failed" in str(orig)


async def list_products(session: AsyncSession) -> List[Product]:
    result = await session.execute(select(Product).order_by(Product.name.asc()))
    return list(result.scalars().all())


async def get_product_by_slug(session: AsyncSession, slug: str) -> Optional[Product]:
    result = await session.execute(select(Product).where(Product.slug == slug))
    return result.scalar_one_or_none()


async def get_product_by_id(session: AsyncSession, product_id: int) -> Optional[Product]:
    result = await session.execute(select(Product).where(Product.id == product_id))
    return result.scalar_one_or_none()


async def create_product(session: AsyncSession, data: Mapping[str, Any]) -> Product:
    """Insert a product; the database assigns ``id`` and ``last_updated``.

    Raises ``SlugConflictError`` when the slug is already taken.
    """
    product = Product(**{field: data.get(field) for field in CREATE_FIELDS if data.get(field) is not None})
    session.add(product)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if _is_unique_violation(exc):
            logger.warning("Slug conflict on create: %s", data.get("slug"))
            raise SlugConflictError() from exc
        raise
    await session.refresh(product)
    logger.info("Created product %s (id=%s)", product.slug, product.id)
    return product


def build_update_values(updates: Mapping[str, Any]) -> dict:
    """Map a partial update onto column assignments, in the caller's key order.

    ``id`` is skipped. Any other key outside ``UPDATABLE_COLUMNS`` raises
    ``UnknownFieldError``. ``last_updated`` is always refreshed server-side.
    """
    values = {}
    for key, value in updates.items():
        if key == "id":
            continue
        if key not in UPDATABLE_COLUMNS:
            raise UnknownFieldError(key)
        values[UPDATABLE_COLUMNS[key].key] = value
    values["last_updated"] = func.now()
    return values


async def update_product(session: AsyncSession, product_id: int, updates: Mapping[str, Any]) -> Optional[Product]:
    values = build_update_values(updates)
    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(**values)
        .returning(Product)
        .execution_options(synchronize_session=False, populate_existing=True)
    )
    result = await session.execute(stmt)
    product = result.scalar_one_or_none()
    await session.commit()
    if product is not None:
        logger.info("Updated product %s fields=%s", product_id, [k for k in values if k != "last_updated"])
    return product


async def get_low_stock_products(session: AsyncSession, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> List[Product]:
    result = await session.execute(
        select(Product)
        .where(Product.inventory < threshold)
        .order_by(Product.inventory.asc(), Product.name.asc())
    )
    return list(result.scalars().all())


async def get_inventory_stats(session: AsyncSession, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> InventoryStats:
    stmt = select(
        func.count(Product.id).label("total_products"),
        func.coalesce(func.sum(Product.inventory), 0).label("total_inventory"),
        func.coalesce(func.sum(case((Product.inventory < threshold, 1), else_=0)), 0).label("low_stock_count"),
        func.avg(Product.price).label("avg_price"),
    )
    row = (await session.execute(stmt)).one()
    return InventoryStats(
        total_products=row.total_products,
        total_inventory=row.total_inventory,
        low_stock_count=row.low_stock_count,
        avg_price=float(row.avg_price) if row.avg_price is not None else None,
    )
