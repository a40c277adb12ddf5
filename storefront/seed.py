"""Seed the catalog with a fixed demo product list.

Idempotent: products whose slug already exists are left alone.

Usage:
    python -m storefront.seed

Reads DATABASE_URL from the environment (or .env).
"""
import asyncio
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from . import repository
from .config import get_settings
from .database import build_engine, build_session_factory, create_tables

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {"name": "Wireless Headphones", "slug": "wireless-headphones", "category": "Audio", "price": Decimal("2999.00"), "inventory": 45,
     "description": "Over-ear Bluetooth headphones with active noise cancellation and 30 hour battery life."},
    {"name": "Mechanical Keyboard", "slug": "mechanical-keyboard", "category": "Accessories", "price": Decimal("4499.00"), "inventory": 12,
     "description": "Tenkeyless keyboard with hot-swappable switches and per-key RGB lighting."},
    {"name": "USB-C Hub", "slug": "usb-c-hub", "category": "Accessories", "price": Decimal("1599.00"), "inventory": 80,
     "description": "7-in-1 hub with HDMI, SD card reader and 100W power delivery pass-through."},
    {"name": "Ultrabook 14", "slug": "ultrabook-14", "category": "Computers", "price": Decimal("74999.00"), "inventory": 8,
     "description": "Lightweight 14 inch laptop with 16GB RAM and a 1TB NVMe drive."},
    {"name": "Smartphone X", "slug": "smartphone-x", "category": "Mobile", "price": Decimal("39999.00"), "inventory": 25,
     "description": "6.1 inch OLED display, dual camera and all-day battery."},
    {"name": "Portable Speaker", "slug": "portable-speaker", "category": "Audio", "price": Decimal("1899.00"), "inventory": 0,
     "description": "Waterproof speaker with 12 hour playtime and stereo pairing."},
    {"name": "4K Monitor", "slug": "4k-monitor", "category": "Electronics", "price": Decimal("27999.00"), "inventory": 33,
     "description": "27 inch IPS panel, HDR400, USB-C input with 65W charging."},
]


async def seed_products(session: AsyncSession, products=DEMO_PRODUCTS) -> int:
    created = 0
    for item in products:
        if await repository.get_product_by_slug(session, item["slug"]) is not None:
            continue
        await repository.create_product(session, item)
        created += 1
    return created


async def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    engine = build_engine(settings)
    try:
        await create_tables(engine)
        async with build_session_factory(engine)() as session:
            created = await seed_products(session)
        logger.info("Seeded %d demo products", created)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
