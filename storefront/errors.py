"""Wyjatki domenowe storefront.

Kazda kategoria niesie status HTTP, ktory handler w main.py przeklada
na koperte ``{"success": false, "message": ...}``.
"""


class StorefrontError(Exception):
    """Base exception for all storefront errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# kategorie


class NotFoundError(StorefrontError):
    status_code = 404


class InvalidError(StorefrontError):
    status_code = 400


class ConflictError(StorefrontError):
    status_code = 409


class UnauthorizedError(StorefrontError):
    status_code = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(StorefrontError):
    status_code = 403

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class RuleViolationError(StorefrontError):
    """Coupon business rule rejected the request."""

    status_code = 400


# not found


class ProductNotFound(NotFoundError):
    """Raised when a reference resolves under neither identity scheme.

    The raw reference is kept for logs only; the message stays generic.
    """

    def __init__(self, reference):
        self.reference = reference
        super().__init__("Product not found")


class CartNotFound(NotFoundError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("Cart not found")


class LineNotFound(NotFoundError):
    def __init__(self, line_id: int):
        self.line_id = line_id
        super().__init__("Item not found in cart")


class CouponNotFound(NotFoundError):
    def __init__(self, code):
        self.code = code
        super().__init__("Invalid coupon code")


class OrderNotFound(NotFoundError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__("Order not found")


# invalid


class InvalidQuantity(InvalidError):
    def __init__(self, quantity, message: str = "Quantity must be at least 1"):
        self.quantity = quantity
        super().__init__(message)


class MissingAddress(InvalidError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Delivery address is incomplete: missing {', '.join(missing)}")


class EmptyCart(InvalidError):
    def __init__(self):
        super().__init__("Cart is empty")


class InvalidTotal(InvalidError):
    def __init__(self, total):
        self.total = total
        super().__init__("Order total cannot be negative")


class InvalidSubtotal(InvalidError):
    def __init__(self, subtotal):
        self.subtotal = subtotal
        super().__init__("Valid subtotal is required (non-negative, at most 2 decimal places)")


class InvalidCoupon(InvalidError):
    """Coupon definition rejected by administration validation."""


class InvalidStatusTransition(InvalidError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change order status from {current} to {target}")


# conflict


class DuplicateCouponCode(ConflictError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon code already exists")


class CartConflict(ConflictError):
    def __init__(self, cart_id: int | None = None):
        self.cart_id = cart_id
        super().__init__("Cart was modified by another request, please retry")


class TotalsMismatch(ConflictError):
    def __init__(self, field: str, quoted, computed):
        self.field = field
        self.quoted = quoted
        self.computed = computed
        super().__init__(f"Order {field} has changed, please review your cart")


# reguly kuponow


class CouponInactive(RuleViolationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("This coupon is not active")


class CouponNotYetValid(RuleViolationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("This coupon is not yet valid")


class CouponExpired(RuleViolationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("This coupon has expired")


class CouponUsageExceeded(RuleViolationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("This coupon has reached its usage limit")


class CouponBelowMinimum(RuleViolationError):
    def __init__(self, code: str, min_amount):
        self.code = code
        self.min_amount = min_amount
        super().__init__(f"Minimum order of {min_amount} required for this coupon")
