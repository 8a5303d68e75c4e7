# storefront/data/models/coupon.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, DateTime, Enum

from storefront.data.database import Base

DISCOUNT_TYPES = ("percentage", "fixed")
APPLICABLE_TO = ("all", "new_users", "existing_users")


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(40), nullable=False, unique=True, index=True)  # zawsze UPPERCASE
    description = Column(Text, nullable=True)

    discount_type = Column(Enum(*DISCOUNT_TYPES, name="discount_type", native_enum=False), nullable=False, default="percentage")
    discount_value = Column(Numeric(10, 2), nullable=False)
    min_amount = Column(Numeric(10, 2), nullable=False, default=0)
    max_discount = Column(Numeric(10, 2), nullable=True)

    valid_from = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    valid_until = Column(DateTime(timezone=True), nullable=False, index=True)

    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    # zapisywane, ale nie egzekwowane przy walidacji
    applicable_to = Column(Enum(*APPLICABLE_TO, name="coupon_audience", native_enum=False), nullable=False, default="all")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
