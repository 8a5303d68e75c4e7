# storefront/services/coupon_service.py
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain import pricing
from storefront.domain.schemas import CouponCreateIn, CouponUpdateIn
from storefront.errors import (
    CouponNotFound,
    CouponUsageExceeded,
    DuplicateCouponCode,
    InvalidCoupon,
    InvalidSubtotal,
)
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

_REQUIRED_FIELDS = ("code", "discount_type", "discount_value", "min_amount", "is_active", "applicable_to")


def normalize_code(code: str) -> str:
    return code.strip().upper()


def coupon_summary(coupon: CouponModel) -> dict:
    return {
        "code": coupon.code,
        "description": coupon.description,
        "discount_type": coupon.discount_type,
        "discount_value": coupon.discount_value,
        "min_amount": coupon.min_amount,
        "max_discount": coupon.max_discount,
    }


class CouponService:
    """
    Ewaluacja kuponow (czysty odczyt) + osobny zapis uzycia.

    evaluate() nic nie zapisuje; record_usage() wolamy dopiero po
    utrwaleniu zamowienia, wiec nieudany checkout nie zjada limitu.
    """

    def __init__(self, db: Session, clock=pricing.utcnow):
        self.repo = CouponRepo(db)
        self.clock = clock

    #query
    def evaluate(self, code: str, subtotal) -> dict:
        subtotal = pricing.as_decimal(subtotal)
        # kwota w pelnych groszach, nieujemna
        if subtotal < 0 or subtotal != pricing.to_money(subtotal):
            raise InvalidSubtotal(subtotal)

        coupon = self.repo.get_by_code(code)
        if not coupon:
            raise CouponNotFound(code)

        discount = pricing.evaluate_coupon(coupon, subtotal, self.clock())
        logger.info(f"Coupon {coupon.code} valid for subtotal {subtotal}, discount {discount}")
        return {"coupon": coupon, "discount": discount}

    def list_available(self) -> list[CouponModel]:
        """Aktywne, w oknie waznosci, z wolnym limitem; najwiekszy rabat pierwszy."""
        now = self.clock()
        coupons = [c for c in self.repo.list_active() if pricing.is_redeemable(c, now)]
        return sorted(coupons, key=lambda c: c.discount_value, reverse=True)

    def list_all(self) -> list[CouponModel]:
        return self.repo.list_all()

    #commands
    def record_usage(self, code: str) -> CouponModel:
        """
        Zapis uzycia kuponu po utworzonym zamowieniu.
        Inkrement warunkowy w jednym UPDATE, wiec rownolegle uzycia nie przekrocza limitu.
        """
        coupon = self.repo.get_by_code(code)
        if not coupon:
            raise CouponNotFound(code)

        if not self.repo.try_increment_usage(coupon.id):
            logger.warning(f"Coupon {coupon.code} usage limit reached")
            raise CouponUsageExceeded(coupon.code)

        self.repo.refresh(coupon)
        logger.info(f"Coupon {coupon.code} used {coupon.used_count} time(s)")
        return coupon

    def create_coupon(self, payload: CouponCreateIn) -> CouponModel:
        now = self.clock()
        valid_from = pricing.as_utc(payload.valid_from) or now
        valid_until = pricing.as_utc(payload.valid_until)

        self._validate(
            discount_type=payload.discount_type,
            discount_value=payload.discount_value,
            min_amount=payload.min_amount,
            max_discount=payload.max_discount,
            valid_from=valid_from,
            valid_until=valid_until,
            now=now,
        )

        code = normalize_code(payload.code)
        if self.repo.get_by_code(code):
            raise DuplicateCouponCode(code)

        coupon = CouponModel(
            code=code,
            description=payload.description,
            discount_type=payload.discount_type,
            discount_value=payload.discount_value,
            min_amount=payload.min_amount,
            max_discount=payload.max_discount,
            valid_from=valid_from,
            valid_until=valid_until,
            usage_limit=payload.usage_limit,
            used_count=0,
            is_active=payload.is_active,
            applicable_to=payload.applicable_to,
        )

        try:
            created = self.repo.create_coupon(coupon)
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateCouponCode(code)

        logger.info(f"Coupon {created.code} created")
        return created

    def update_coupon(self, coupon_id: int, payload: CouponUpdateIn) -> CouponModel:
        coupon = self.repo.get_coupon(coupon_id)
        if not coupon:
            raise CouponNotFound(coupon_id)

        changes = payload.model_dump(exclude_unset=True)
        now = self.clock()

        for field in _REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise InvalidCoupon(f"{field} cannot be empty")

        # validUntil przy aktualizacji tez musi byc w przyszlosci
        if "valid_until" in changes and changes["valid_until"] is None:
            raise InvalidCoupon("Valid until date is required")
        if changes.get("valid_until") is not None:
            changes["valid_until"] = pricing.as_utc(changes["valid_until"])
            if changes["valid_until"] <= now:
                raise InvalidCoupon("Valid until date must be in the future")
        if "valid_from" in changes:
            changes["valid_from"] = pricing.as_utc(changes["valid_from"]) or now
        if changes.get("code") is not None:
            changes["code"] = normalize_code(changes["code"])
            other = self.repo.get_by_code(changes["code"])
            if other and other.id != coupon.id:
                raise DuplicateCouponCode(changes["code"])

        merged = {
            "discount_type": coupon.discount_type,
            "discount_value": coupon.discount_value,
            "min_amount": coupon.min_amount,
            "max_discount": coupon.max_discount,
            "valid_from": pricing.as_utc(coupon.valid_from),
            "valid_until": pricing.as_utc(coupon.valid_until),
        }
        merged.update({k: v for k, v in changes.items() if k in merged})
        self._validate(**merged, now=None)

        for field, value in changes.items():
            setattr(coupon, field, value)

        try:
            saved = self.repo.save(coupon)
        except IntegrityError:
            self.repo.rollback()
            raise DuplicateCouponCode(coupon.code)

        logger.info(f"Coupon {saved.code} updated: {sorted(changes)}")
        return saved

    def delete_coupon(self, coupon_id: int) -> None:
        coupon = self.repo.get_coupon(coupon_id)
        if not coupon:
            raise CouponNotFound(coupon_id)
        self.repo.delete_coupon(coupon)
        logger.info(f"Coupon {coupon_id} deleted")

    @staticmethod
    def _validate(
        discount_type: str,
        discount_value,
        min_amount,
        max_discount,
        valid_from: datetime,
        valid_until: datetime,
        now: datetime | None,
    ) -> None:
        if discount_value is None or discount_value <= 0:
            raise InvalidCoupon("Discount value must be greater than 0")
        if discount_type == pricing.PERCENTAGE and discount_value > Decimal(100):
            raise InvalidCoupon("Percentage discount cannot exceed 100%")
        if min_amount is None or min_amount < 0:
            raise InvalidCoupon("Minimum amount cannot be negative")
        if max_discount is not None and max_discount < 0:
            raise InvalidCoupon("Max discount cannot be negative")
        if now is not None and valid_until <= now:
            raise InvalidCoupon("Valid until date must be in the future")
        if valid_from >= valid_until:
            raise InvalidCoupon("Valid from date must be before valid until date")
