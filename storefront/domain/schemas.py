# storefront/domain/schemas.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# kwoty trzymamy jako Decimal, w JSON wychodza jako liczby
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

T = TypeVar("T")

DiscountType = Literal["percentage", "fixed"]
Audience = Literal["all", "new_users", "existing_users"]
PaymentMethod = Literal["card", "cash", "paypal", "cod"]


class CamelModel(BaseModel):
    """Wspolna konfiguracja: camelCase na zewnatrz, snake_case w kodzie."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    """Koperta odpowiedzi: {success, message?, data?}."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


# ----- produkty -----


class ProductOut(CamelModel):
    id: uuid.UUID
    legacy_id: Optional[int] = None
    name: str
    description: str
    price: Money
    image: str
    category: str
    is_veg: bool
    badges: List[str]
    featured: bool
    available: bool


# ----- koszyk -----


class CartItemIn(CamelModel):
    """Schema dla dodawania produktu do koszyka."""

    # kanoniczne UUID albo stare numeryczne id
    product_id: int | str
    quantity: int = 1


class CartItemUpdateIn(CamelModel):
    quantity: int
    # ostatnio widziana wersja koszyka (opcjonalnie, optimistic locking po stronie klienta)
    version: Optional[int] = None


class CartLineOut(CamelModel):
    id: int
    product_id: uuid.UUID
    name: str
    price: Money
    image: Optional[str] = None
    quantity: int
    line_total: Money


class CartOut(CamelModel):
    id: int
    user_id: str
    version: int
    items: List[CartLineOut]
    item_count: int
    subtotal: Money
    updated_at: datetime


# ----- kupony -----


class CouponValidateIn(CamelModel):
    code: str = Field(..., min_length=1)
    subtotal: Decimal


class CouponSummary(CamelModel):
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Money
    min_amount: Money
    max_discount: Optional[Money] = None


class CouponValidationOut(CamelModel):
    coupon: CouponSummary
    discount: Money


class CouponOut(CamelModel):
    id: int
    code: str
    description: Optional[str] = None
    discount_type: DiscountType
    discount_value: Money
    min_amount: Money
    max_discount: Optional[Money] = None
    valid_from: datetime
    valid_until: datetime
    usage_limit: Optional[int] = None
    used_count: int
    is_active: bool
    applicable_to: Audience


class CouponCreateIn(CamelModel):
    code: str = Field(..., min_length=1, max_length=40)
    description: Optional[str] = None
    discount_type: DiscountType = "percentage"
    discount_value: Decimal
    min_amount: Decimal = Decimal("0")
    max_discount: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_until: datetime
    usage_limit: Optional[int] = Field(None, ge=0)
    is_active: bool = True
    applicable_to: Audience = "all"


class CouponUpdateIn(CamelModel):
    code: Optional[str] = Field(None, min_length=1, max_length=40)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    min_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    usage_limit: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    applicable_to: Optional[Audience] = None


# ----- zamowienia -----


class AddressIn(CamelModel):
    # wszystkie pola wymagane, brak sprawdzany w serwisie (MissingAddress)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class QuotedItemIn(CamelModel):
    product_id: uuid.UUID
    quantity: int


class OrderCreateIn(CamelModel):
    """
    Zamowienie skladane z koszyka na serwerze.
    items/subtotal/deliveryFee/discount to kwoty pokazane klientowi, sprawdzane z wyliczeniem.
    """

    address: Optional[AddressIn] = None
    payment_method: PaymentMethod = "card"
    coupon_code: Optional[str] = None
    items: Optional[List[QuotedItemIn]] = None
    subtotal: Optional[Decimal] = None
    delivery_fee: Optional[Decimal] = None
    discount: Optional[Decimal] = None


class OrderStatusIn(CamelModel):
    status: str


class OrderLineOut(CamelModel):
    product_id: uuid.UUID
    name: str
    price: Money
    image: Optional[str] = None
    quantity: int


class OrderAddressOut(CamelModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    street: str
    city: str
    zip_code: str
    country: str


class OrderOut(CamelModel):
    id: int
    order_number: str
    user_id: str
    status: str
    items: List[OrderLineOut]
    subtotal: Money
    delivery_fee: Money
    discount: Money
    total: Money
    coupon_code: Optional[str] = None
    address: OrderAddressOut
    payment_method: PaymentMethod
    created_at: datetime
    updated_at: datetime
