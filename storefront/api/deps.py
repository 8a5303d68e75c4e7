# storefront/api/deps.py
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.errors import ForbiddenError, UnauthorizedError
from storefront.services.cart_service import CartService
from storefront.services.catalog_service import CatalogResolver
from storefront.services.coupon_service import CouponService
from storefront.services.notification_service import NotificationService
from storefront.services.order_number_service import OrderNumberService
from storefront.services.order_service import OrderService


@dataclass(frozen=True)
class Identity:
    """Uzytkownik przekazany przez gateway autoryzacji."""

    user_id: str
    is_admin: bool = False


def get_identity(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Identity:
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedError()
    return Identity(
        user_id=x_user_id.strip(),
        is_admin=(x_user_role or "").strip().lower() == "admin",
    )


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    if not identity.is_admin:
        raise ForbiddenError()
    return identity


@lru_cache
def get_order_number_service() -> OrderNumberService:
    return OrderNumberService()


def get_notification_service() -> NotificationService:
    return NotificationService()


def get_catalog(db: Session = Depends(get_db)) -> CatalogResolver:
    return CatalogResolver(db)


def get_cart_service(db: Session = Depends(get_db)) -> CartService:
    return CartService(db)


def get_coupon_service(db: Session = Depends(get_db)) -> CouponService:
    return CouponService(db)


def get_order_service(
    db: Session = Depends(get_db),
    order_numbers: OrderNumberService = Depends(get_order_number_service),
    notifications: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(db, order_numbers=order_numbers, notifications=notifications)
