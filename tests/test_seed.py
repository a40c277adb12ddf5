import pytest

from storefront import repository
from storefront.seed import DEMO_PRODUCTS, seed_products

pytestmark = pytest.mark.anyio


async def test_seed_is_idempotent(session):
    assert await seed_products(session) == len(DEMO_PRODUCTS)
    assert await seed_products(session) == 0

    products = await repository.list_products(session)
    assert len(products) == len(DEMO_PRODUCTS)

    stats = await repository.get_inventory_stats(session)
    assert stats.total_inventory == sum(p["inventory"] for p in DEMO_PRODUCTS)
    assert stats.low_stock_count == sum(1 for p in DEMO_PRODUCTS if p["inventory"] < 30)
