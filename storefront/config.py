# storefront/config.py
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./storefront.db"


def normalize_database_url(url: str) -> str:
    """Hosted Postgres providers hand out postgres:// URLs; the engine needs the asyncpg driver."""
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


class Settings(BaseModel):
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    log_level: str = "INFO"

    # shared secrets for mutating endpoints
    admin_api_key: Optional[str] = None
    admin_upload_key: Optional[str] = None

    # admin login
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None
    session_secret: Optional[str] = None
    session_expire_minutes: int = 60

    low_stock_threshold: int = 30

    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "products"

    # browser origins allowed to call the API with the admin cookie; none by default
    cors_origins: List[str] = []


def get_settings(env_file: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path=env_file, override=False)

    origins = os.getenv("CORS_ORIGINS", "")
    return Settings(
        database_url=normalize_database_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)),
        database_echo=os.getenv("DATABASE_ECHO", "0") == "1",
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        admin_api_key=os.getenv("ADMIN_API_KEY") or None,
        admin_upload_key=os.getenv("ADMIN_UPLOAD_KEY") or None,
        admin_password=os.getenv("ADMIN_PASSWORD") or None,
        admin_password_hash=os.getenv("ADMIN_PASSWORD_HASH") or None,
        session_secret=os.getenv("SESSION_SECRET") or None,
        session_expire_minutes=int(os.getenv("SESSION_EXPIRE_MINUTES", "60")),
        low_stock_threshold=int(os.getenv("LOW_STOCK_THRESHOLD", "30")),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME") or None,
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY") or None,
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_SECRET") or None,
        cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", "products"),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
