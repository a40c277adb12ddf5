# storefront/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


# 🛍️ Product
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    price: Decimal
    description: str = ""
    category: str = ""
    inventory: int = 0
    image_urls: Optional[List[str]] = None
    image_public_ids: Optional[List[str]] = None


class ProductUpdate(BaseModel):
    """Partial update body. Only keys the client actually sent are applied."""

    # the admin form echoes these back; id is ignored and slug must not change
    id: Optional[int] = None
    slug: Optional[str] = None

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    category: Optional[str] = None
    inventory: Optional[int] = None
    image_urls: Optional[List[str]] = None
    image_public_ids: Optional[List[str]] = None

    @field_validator("name", "description", "price", "category", "inventory")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    class Config:
        extra = "forbid"


class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    description: str
    price: float
    category: str
    inventory: int
    last_updated: datetime
    image_urls: Optional[List[str]] = None
    image_public_ids: Optional[List[str]] = None

    class Config:
        from_attributes = True


# 📊 Inventory
class InventoryStats(BaseModel):
    total_products: int
    total_inventory: int
    low_stock_count: int
    avg_price: Optional[float] = None


class DashboardProduct(ProductOut):
    stock_status: str
    primary_image_url: str


class DashboardOut(BaseModel):
    threshold: int
    generated_at: datetime
    stats: InventoryStats
    low_stock: List[DashboardProduct]
    products: List[DashboardProduct]


# 🖼️ Images
class UploadOut(BaseModel):
    url: str
    public_id: str


# 🔐 Admin session
class AdminLogin(BaseModel):
    password: str


class SessionToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class SessionStatus(BaseModel):
    authenticated: bool
    expires_at: Optional[datetime] = None
