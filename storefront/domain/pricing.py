# storefront/domain/pricing.py
"""
Czyste reguly cenowe: zaokraglanie kwot, subtotal, oplata za dostawe,
walidacja i wyliczenie rabatu z kuponu.

Nic tutaj nie pisze do bazy, funkcje dostaja rekord kuponu, kwote i czas.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Iterable

from storefront.errors import (
    CouponBelowMinimum,
    CouponExpired,
    CouponInactive,
    CouponNotYetValid,
    CouponUsageExceeded,
    RuleViolationError,
)

ZERO = Decimal("0.00")
CENT = Decimal("0.01")

PERCENTAGE = "percentage"
FIXED = "fixed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    # sqlite zwraca naiwne daty, zapisujemy zawsze UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Decimal:
    """Round to cents, half-up."""
    return as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(price, quantity: int) -> Decimal:
    return to_money(as_decimal(price) * quantity)


def subtotal(lines: Iterable) -> Decimal:
    """Sum of price x quantity over snapshot lines (anything with .price and .quantity)."""
    return to_money(sum((as_decimal(line.price) * line.quantity for line in lines), ZERO))


@dataclass(frozen=True)
class DeliveryPolicy:
    flat_fee: Decimal
    free_above: Decimal

    def fee_for(self, amount: Decimal) -> Decimal:
        if amount > self.free_above:
            return ZERO
        return to_money(self.flat_fee)


def check_redeemable(coupon, now: datetime) -> None:
    """Raise the first rule the coupon breaks at ``now`` (ignores order amount)."""
    if not coupon.is_active:
        raise CouponInactive(coupon.code)

    valid_from = as_utc(coupon.valid_from)
    if valid_from is not None and now < valid_from:
        raise CouponNotYetValid(coupon.code)

    if now > as_utc(coupon.valid_until):
        raise CouponExpired(coupon.code)

    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        raise CouponUsageExceeded(coupon.code)


def is_redeemable(coupon, now: datetime) -> bool:
    try:
        check_redeemable(coupon, now)
    except RuleViolationError:
        return False
    return True


def compute_discount(coupon, amount: Decimal) -> Decimal:
    amount = as_decimal(amount)
    value = as_decimal(coupon.discount_value)

    if coupon.discount_type == PERCENTAGE:
        discount = amount * value / Decimal(100)
        if coupon.max_discount is not None:
            discount = min(discount, as_decimal(coupon.max_discount))
    else:
        # staly rabat nie moze zejsc ponizej zera
        discount = min(value, amount)

    # rabat nigdy nie przekracza kwoty obcietej do pelnych groszy
    ceiling = max(amount, ZERO).quantize(CENT, rounding=ROUND_DOWN)
    return min(to_money(max(discount, ZERO)), ceiling)


def evaluate_coupon(coupon, amount: Decimal, now: datetime) -> Decimal:
    """
    Pelna walidacja kuponu dla danego subtotalu.
    Kolejnosc: aktywny, okno waznosci, limit uzyc, minimalna kwota.
    """
    amount = as_decimal(amount)
    check_redeemable(coupon, now)

    if amount < as_decimal(coupon.min_amount):
        raise CouponBelowMinimum(coupon.code, to_money(coupon.min_amount))

    return compute_discount(coupon, amount)


def order_total(amount: Decimal, delivery_fee: Decimal, discount: Decimal) -> Decimal:
    return to_money(amount + delivery_fee - discount)
