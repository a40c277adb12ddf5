import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.database import build_engine, build_session_factory, create_tables
from storefront.main import create_app

ADMIN_KEY = "test-admin-key"
UPLOAD_KEY = "test-upload-key"
ADMIN_PASSWORD = "correct horse battery staple"

ADMIN_HEADERS = {"Authorization": f"Bearer {ADMIN_KEY}"}
UPLOAD_HEADERS = {"Authorization": f"Bearer {UPLOAD_KEY}"}


def product_payload(**overrides) -> dict:
    data = {
        "name": "Wireless Mouse",
        "slug": "wireless-mouse",
        "description": "Ergonomic 2.4GHz mouse",
        "price": 799.5,
        "category": "Accessories",
        "inventory": 40,
        "image_urls": ["https://res.cloudinary.com/demo/image/upload/products/mouse.png"],
        "image_public_ids": ["products/mouse"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
        admin_api_key=ADMIN_KEY,
        admin_upload_key=UPLOAD_KEY,
        admin_password=ADMIN_PASSWORD,
        session_secret="test-session-secret",
        cloudinary_cloud_name="demo",
        cloudinary_api_key="123456",
        cloudinary_api_secret="shh",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
async def session(settings, anyio_backend):
    engine = build_engine(settings)
    await create_tables(engine)
    async with build_session_factory(engine)() as s:
        yield s
    await engine.dispose()
