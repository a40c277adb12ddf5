# storefront/shop.py
import logging
from typing import List, Optional, Type

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from . import repository
from .auth import require_product_admin
from .catalog import ALL_CATEGORIES, filter_products, list_categories
from .database import get_session
from .errors import ImmutableFieldError, ProductNotFoundError
from .schemas import ProductCreate, ProductOut, ProductUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


async def read_payload(request: Request, schema: Type[BaseModel]) -> BaseModel:
    """Parse the JSON body inside the handler, so the admin dependency has already run."""
    try:
        data = await request.json()
    except ValueError as exc:
        raise RequestValidationError([{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}]) from exc
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors(include_url=False)]
        ) from exc


@router.get("", response_model=List[ProductOut])
async def list_products(
    q: Optional[str] = None,
    category: str = ALL_CATEGORIES,
    session: AsyncSession = Depends(get_session),
):
    products = await repository.list_products(session)
    if q or category != ALL_CATEGORIES:
        products = filter_products(products, search=q or "", category=category)
    return products


@router.get("/categories", response_model=List[str])
async def get_categories(session: AsyncSession = Depends(get_session)):
    return list_categories(await repository.list_products(session))


@router.get("/{slug}", response_model=ProductOut)
async def get_product(slug: str, session: AsyncSession = Depends(get_session)):
    product = await repository.get_product_by_slug(session, slug)
    if not product:
        raise ProductNotFoundError()
    return product


@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_product_admin)],
)
async def create_product(request: Request, session: AsyncSession = Depends(get_session)):
    payload = await read_payload(request, ProductCreate)
    return await repository.create_product(session, payload.model_dump())


@router.put("/{slug}", response_model=ProductOut, dependencies=[Depends(require_product_admin)])
async def update_product(slug: str, request: Request, session: AsyncSession = Depends(get_session)):
    payload = await read_payload(request, ProductUpdate)
    existing = await repository.get_product_by_slug(session, slug)
    if not existing:
        raise ProductNotFoundError()

    updates = payload.model_dump(exclude_unset=True)
    # the admin form resubmits the slug unchanged; any other value is a rename
    new_slug = updates.pop("slug", slug)
    if new_slug != slug:
        raise ImmutableFieldError("Product slug cannot be changed")

    product = await repository.update_product(session, existing.id, updates)
    if product is None:
        # deleted out from under us between the lookup and the update
        raise ProductNotFoundError()
    return product
