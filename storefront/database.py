# storefront/database.py
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import Settings

# Base declarative
Base = declarative_base()


def build_engine(settings: Settings) -> AsyncEngine:
    # The engine owns the connection pool; one per process, created by the app lifespan.
    return create_async_engine(settings.database_url, echo=settings.database_echo, future=True)


def build_session_factory(engine: AsyncEngine):
    return sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session
