# storefront/data/models/product.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, DateTime, JSON, Enum, Uuid

from storefront.data.database import Base

CATEGORIES = ("starters", "ramen", "sushi", "rice-bowls", "desserts", "drinks")


class ProductModel(Base):
    __tablename__ = "products"

    # kanoniczne id generowane przez baze + stare numeryczne id z seeda
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    legacy_id = Column(Integer, unique=True, nullable=True, index=True)

    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=False, default="")
    category = Column(Enum(*CATEGORIES, name="product_category", native_enum=False), nullable=False, index=True)

    is_veg = Column(Boolean, nullable=False, default=False)
    badges = Column(JSON, nullable=False, default=list)
    featured = Column(Boolean, nullable=False, default=False, index=True)
    available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
