from sqlalchemy import (
    Column, Integer, String, Text, DateTime, func,
    Numeric, Index, JSON
)
from sqlalchemy.dialects.postgresql import ARRAY
from .database import Base

# text[] on Postgres, JSON list everywhere else (local SQLite runs and tests)
StringList = ARRAY(Text).with_variant(JSON(), "sqlite")


# 🛍️ Product
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False)  # 🔗 used in URLs, never changes
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)         # 💰 exact money
    category = Column(String(100), nullable=False, default="")
    inventory = Column(Integer, nullable=False, default=0)  # 📦 units on hand
    last_updated = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # parallel lists: image_public_ids[i] addresses image_urls[i] at the media host
    image_urls = Column(StringList, nullable=True)
    image_public_ids = Column(StringList, nullable=True)

    __table_args__ = (
        Index("ix_products_inventory", "inventory"),
        Index("ix_products_category_name", "category", "name"),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} slug={self.slug!r} inventory={self.inventory}>"
