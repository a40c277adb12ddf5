# storefront/catalog.py
"""Storefront browsing helpers: search, category filter, stock badges."""
from typing import Iterable, List
from urllib.parse import quote

ALL_CATEGORIES = "all"
PLACEHOLDER_IMAGE = "https://placehold.co/400x300/e2e8f0/64748b?text={}"

IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"


def filter_products(products: Iterable, search: str = "", category: str = ALL_CATEGORIES) -> List:
    term = (search or "").strip().lower()
    category = category or ALL_CATEGORIES
    out = []
    for p in products:
        if term and term not in (p.name or "").lower() and term not in (p.description or "").lower():
            continue
        if category != ALL_CATEGORIES and p.category != category:
            continue
        out.append(p)
    return out


def list_categories(products: Iterable) -> List[str]:
    # first-seen order, like the storefront dropdown
    seen = []
    for p in products:
        if p.category and p.category not in seen:
            seen.append(p.category)
    return seen


def stock_status(inventory: int, threshold: int) -> str:
    if inventory <= 0:
        return OUT_OF_STOCK
    if inventory < threshold:
        return LOW_STOCK
    return IN_STOCK


def primary_image_url(product) -> str:
    if product.image_urls:
        return product.image_urls[0]
    return PLACEHOLDER_IMAGE.format(quote(product.name or ""))
