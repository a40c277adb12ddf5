# storefront/main.py
import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import auth, inventory, shop, upload
from .config import Settings, get_settings
from .database import build_engine, build_session_factory, create_tables
from .errors import install_error_handlers

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # the engine (and its connection pool) lives exactly as long as the app
    settings: Settings = app.state.settings
    engine = build_engine(settings)
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    await create_tables(engine)
    logger.info("Storefront started")
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Storefront stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if not settings.session_secret:
        # sessions then only survive as long as this process
        logger.warning("SESSION_SECRET is not set, using a random per-process secret")
        settings = settings.model_copy(update={"session_secret": secrets.token_urlsafe(32)})

    app = FastAPI(
        title="Storefront",
        description="🛍️ Product catalog, inventory dashboard and admin API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ✅ CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        # a wildcard would echo any origin back alongside the session cookie
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Routers
    app.include_router(shop.router)
    app.include_router(inventory.router)
    app.include_router(upload.router)
    app.include_router(auth.router)
    install_error_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
