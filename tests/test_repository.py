from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import update

from storefront import repository
from storefront.errors import SlugConflictError, UnknownFieldError
from storefront.models import Product

from .conftest import product_payload

pytestmark = pytest.mark.anyio


async def _add(session, slug, inventory, price=10, **extra):
    return await repository.create_product(
        session,
        product_payload(name=extra.pop("name", slug.title()), slug=slug, inventory=inventory, price=Decimal(str(price)), **extra),
    )


async def test_create_then_get_by_slug_returns_input_plus_server_fields(session):
    data = product_payload(price=Decimal("799.50"))
    created = await repository.create_product(session, data)

    fetched = await repository.get_product_by_slug(session, "wireless-mouse")
    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.last_updated is not None
    for field in ("name", "slug", "description", "category", "inventory", "image_urls", "image_public_ids"):
        assert getattr(fetched, field) == data[field]
    assert Decimal(fetched.price) == Decimal("799.50")


async def test_get_missing_product_returns_none(session):
    assert await repository.get_product_by_slug(session, "nope") is None
    assert await repository.get_product_by_id(session, 999) is None


async def test_get_by_id(session):
    created = await _add(session, "cable", 3)
    fetched = await repository.get_product_by_id(session, created.id)
    assert fetched.slug == "cable"


async def test_create_without_images_stores_nulls(session):
    created = await repository.create_product(
        session, product_payload(slug="plain", image_urls=None, image_public_ids=None)
    )
    assert created.image_urls is None
    assert created.image_public_ids is None


async def test_duplicate_slug_conflicts_and_keeps_first(session):
    await _add(session, "dup", 5, name="First")
    with pytest.raises(SlugConflictError):
        await _add(session, "dup", 7, name="Second")

    kept = await repository.get_product_by_slug(session, "dup")
    assert kept.name == "First"
    assert kept.inventory == 5
    assert len(await repository.list_products(session)) == 1


async def test_list_products_is_ordered_by_name(session):
    await _add(session, "c", 1, name="Charger")
    await _add(session, "a", 1, name="Adapter")
    await _add(session, "b", 1, name="Battery")

    names = [p.name for p in await repository.list_products(session)]
    assert names == ["Adapter", "Battery", "Charger"]


async def test_partial_update_touches_only_given_fields(session):
    created = await _add(session, "mouse", 40, price=799)
    before = {f: getattr(created, f) for f in ("name", "slug", "description", "category", "image_urls", "image_public_ids")}
    await session.execute(
        update(Product).where(Product.id == created.id).values(last_updated=datetime(2020, 1, 1))
    )
    await session.commit()

    updated = await repository.update_product(session, created.id, {"inventory": 5})

    assert updated.inventory == 5
    assert updated.last_updated.replace(tzinfo=None) > datetime(2020, 1, 1)
    for field, value in before.items():
        assert getattr(updated, field) == value
    assert Decimal(updated.price) == Decimal("799")


async def test_update_ignores_id_key(session):
    created = await _add(session, "hub", 10)
    updated = await repository.update_product(session, created.id, {"id": 12345, "name": "USB Hub"})
    assert updated.id == created.id
    assert updated.name == "USB Hub"


async def test_update_missing_product_returns_none(session):
    await _add(session, "only", 10)
    assert await repository.update_product(session, 999, {"inventory": 1}) is None
    assert (await repository.get_product_by_slug(session, "only")).inventory == 10


async def test_update_rejects_fields_outside_allow_list(session):
    created = await _add(session, "safe", 10)
    with pytest.raises(UnknownFieldError):
        await repository.update_product(session, created.id, {"inventory": 0, "name = 'x' --": "boom"})
    assert (await repository.get_product_by_slug(session, "safe")).inventory == 10


def test_build_update_values_keeps_key_order_and_refreshes_timestamp():
    values = repository.build_update_values({"price": 1, "id": 3, "name": "x", "inventory": 2})
    assert list(values) == ["price", "name", "inventory", "last_updated"]


def test_slug_and_timestamp_are_not_updatable():
    for field in ("slug", "last_updated"):
        with pytest.raises(UnknownFieldError):
            repository.build_update_values({field: "x"})


async def test_low_stock_example_scenario(session):
    await _add(session, "a", 5, name="A")
    await _add(session, "b", 50, name="B")

    low = await repository.get_low_stock_products(session, 30)
    assert [p.slug for p in low] == ["a"]

    stats = await repository.get_inventory_stats(session, 30)
    assert stats.low_stock_count == 1
    assert stats.total_products == 2


async def test_low_stock_excludes_threshold_and_sorts_ascending(session):
    await _add(session, "thirty", 30)
    await _add(session, "twenty", 20)
    await _add(session, "zero", 0)
    await _add(session, "twenty-nine", 29)

    low = await repository.get_low_stock_products(session)
    assert [p.inventory for p in low] == [0, 20, 29]


async def test_inventory_stats_aggregates(session):
    await _add(session, "a", 5, price=10)
    await _add(session, "b", 50, price=20)
    await _add(session, "c", 29, price=45)

    stats = await repository.get_inventory_stats(session)
    assert stats.total_products == 3
    assert stats.total_inventory == 84
    assert stats.low_stock_count == 2
    assert stats.avg_price == pytest.approx(25.0)


async def test_inventory_stats_on_empty_catalog(session):
    stats = await repository.get_inventory_stats(session)
    assert stats.total_products == 0
    assert stats.total_inventory == 0
    assert stats.low_stock_count == 0
    assert stats.avg_price is None
