# storefront/services/order_service.py
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain import pricing
from storefront.domain.order_status import OrderStatus, can_transition
from storefront.errors import (
    EmptyCart,
    InvalidError,
    InvalidStatusTransition,
    InvalidTotal,
    MissingAddress,
    OrderNotFound,
    TotalsMismatch,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService
from storefront.services.notification_service import NotificationService
from storefront.services.order_number_service import OrderNumberService
from storefront.utils.settings import DELIVERY_FEE, FREE_DELIVERY_THRESHOLD
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "street",
    "city",
    "zip_code",
    "country",
)


def default_delivery_policy() -> pricing.DeliveryPolicy:
    return pricing.DeliveryPolicy(flat_fee=DELIVERY_FEE, free_above=FREE_DELIVERY_THRESHOLD)


@dataclass(frozen=True)
class Quote:
    subtotal: Decimal
    delivery_fee: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None


def normalize_address(address) -> Dict[str, str]:
    if address is None:
        address = {}
    elif hasattr(address, "model_dump"):
        address = address.model_dump()

    cleaned = {}
    missing = []
    for field in ADDRESS_FIELDS:
        value = address.get(field)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            missing.append(field)
        else:
            cleaned[field] = value

    if missing:
        raise MissingAddress(missing)
    return cleaned


class OrderService:
    """
    Serwis odpowiedzialny za domene zamowien.

    Zamowienie to niezmienny snapshot linii koszyka + wyliczone kwoty.
    Po zapisie: uzycie kuponu i wyczyszczenie koszyka (best effort,
    ich blad nie cofa zamowienia).
    """

    def __init__(
        self,
        db: Session,
        order_numbers: OrderNumberService,
        notifications: NotificationService | None = None,
        delivery_policy: pricing.DeliveryPolicy | None = None,
        coupons: CouponService | None = None,
        carts: CartService | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.cart_repo = CartRepo(db)
        self.order_numbers = order_numbers
        self.notification_service = notifications or NotificationService()
        self.delivery_policy = delivery_policy or default_delivery_policy()
        self.coupons = coupons or CouponService(db)
        self.carts = carts or CartService(db)

    def quote(self, lines: list, coupon_code: str | None = None) -> Quote:
        """Wylicza kwoty na podstawie snapshotu linii, bez ponownego czytania katalogu."""
        amount = pricing.subtotal(lines)
        delivery_fee = self.delivery_policy.fee_for(amount)

        discount = pricing.ZERO
        applied = None
        if coupon_code:
            # odrzucenie kuponu przerywa caly checkout, nic nie jest zapisane
            evaluation = self.coupons.evaluate(coupon_code, amount)
            discount = evaluation["discount"]
            applied = evaluation["coupon"].code

        total = pricing.order_total(amount, delivery_fee, discount)
        if total < 0:
            raise InvalidTotal(total)

        return Quote(
            subtotal=amount,
            delivery_fee=delivery_fee,
            discount=discount,
            total=total,
            coupon_code=applied,
        )

    def create_order(
        self,
        user_id: str,
        lines: list,
        address,
        payment_method: str = "card",
        coupon_code: str | None = None,
        quoted: Dict[str, Any] | None = None,
    ) -> OrderModel:
        """
        Use Case: utworzenie zamowienia z linii koszyka.

        1. Pusty koszyk / niepelny adres -> odrzucenie
        2. Subtotal, dostawa, rabat z kuponu, total
        3. Zapis zamowienia ze statusem pending
        4. Zapis uzycia kuponu + czyszczenie koszyka + powiadomienie
        """
        if not lines:
            raise EmptyCart()

        address = normalize_address(address)
        quote = self.quote(lines, coupon_code)

        if quoted:
            self._check_quoted(lines, quote, quoted)

        order = OrderModel(
            user_id=user_id,
            order_number=self.order_numbers.next_order_number(),
            status=OrderStatus.PENDING.value,
            subtotal=quote.subtotal,
            delivery_fee=quote.delivery_fee,
            discount=quote.discount,
            total=quote.total,
            coupon_code=quote.coupon_code,
            address=address,
            payment_method=payment_method,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    name=line.name,
                    price=line.price,
                    image=line.image,
                    quantity=line.quantity,
                )
                for line in lines
            ],
        )

        try:
            created = self.repo.create_order(order)
        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Order {created.order_number} created for user {user_id}: "
            f"subtotal={quote.subtotal} delivery={quote.delivery_fee} "
            f"discount={quote.discount} total={quote.total}"
        )

        self._after_order_created(created, user_id)
        return created

    def checkout(self, user_id: str, payload) -> Dict[str, Any]:
        """Zamowienie z aktualnego koszyka uzytkownika (snapshot z serwera)."""
        cart = self.cart_repo.get_cart_by_user(user_id)
        lines = self.cart_repo.get_cart_items(cart.id) if cart else []

        quoted = {
            key: value
            for key, value in {
                "items": payload.items,
                "subtotal": payload.subtotal,
                "delivery_fee": payload.delivery_fee,
                "discount": payload.discount,
            }.items()
            if value is not None
        }

        order = self.create_order(
            user_id=user_id,
            lines=lines,
            address=payload.address,
            payment_method=payload.payment_method,
            coupon_code=payload.coupon_code,
            quoted=quoted,
        )
        return self.to_dict(order)

    def get_order(self, order_id: int, user_id: str) -> Dict[str, Any]:
        order = self.repo.get_user_order(order_id, user_id)
        if not order:
            raise OrderNotFound(order_id)
        return self.to_dict(order)

    def list_orders(self, user_id: str) -> list[Dict[str, Any]]:
        return [self.to_dict(o) for o in self.repo.list_user_orders(user_id)]

    def update_status(self, order_id: int, status: str) -> Dict[str, Any]:
        """Zmiana statusu (administracyjna), zgodnie z maszyna stanow."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise InvalidError("Invalid status")

        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)

        current = OrderStatus(order.status)
        if not can_transition(current, target):
            raise InvalidStatusTransition(current.value, target.value)

        updated = self.repo.update_order_status(order, target.value)
        logger.info(f"Order {updated.order_number} status {current.value} -> {target.value}")

        self._notify(updated)
        return self.to_dict(updated)

    def to_dict(self, order: OrderModel) -> Dict[str, Any]:
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status,
            "items": [
                {
                    "product_id": i.product_id,
                    "name": i.name,
                    "price": i.price,
                    "image": i.image,
                    "quantity": i.quantity,
                }
                for i in order.items
            ],
            "subtotal": order.subtotal,
            "delivery_fee": order.delivery_fee,
            "discount": order.discount,
            "total": order.total,
            "coupon_code": order.coupon_code,
            "address": order.address,
            "payment_method": order.payment_method,
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }

    def _check_quoted(self, lines: Iterable, quote: Quote, quoted: Dict[str, Any]) -> None:
        # klient pokazal inne kwoty niz wyliczone na serwerze -> nie zapisujemy
        if "items" in quoted:
            ours = Counter((line.product_id, line.quantity) for line in lines)
            theirs = Counter((item.product_id, item.quantity) for item in quoted["items"])
            if ours != theirs:
                raise TotalsMismatch("items", len(quoted["items"]), len(lines))

        for field in ("subtotal", "delivery_fee", "discount"):
            if field in quoted:
                expected = getattr(quote, field)
                if pricing.to_money(quoted[field]) != expected:
                    raise TotalsMismatch(field, quoted[field], expected)

    def _after_order_created(self, order: OrderModel, user_id: str) -> None:
        # zamowienie jest juz zapisane, bledy ponizej tylko logujemy
        order_number = order.order_number
        coupon_code = order.coupon_code

        if coupon_code:
            try:
                self.coupons.record_usage(coupon_code)
            except Exception:
                self.db.rollback()
                logger.exception(f"Failed to record usage of coupon {coupon_code} for order {order_number}")

        try:
            self.carts.clear(user_id)
        except Exception:
            self.db.rollback()
            logger.exception(f"Failed to clear cart of user {user_id} after order {order_number}")

        self._notify(order)

    def _notify(self, order: OrderModel) -> None:
        try:
            self.notification_service.send_order_notification(
                order.user_id, order.order_number, order.status
            )
        except Exception as e:
            logger.warning(f"Failed to send notification for order {order.order_number}: {e}")
