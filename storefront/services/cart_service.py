from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain import pricing
from storefront.errors import CartConflict, CartNotFound, InvalidQuantity, LineNotFound
from storefront.repos.cart_repo import CartRepo
from storefront.services.catalog_service import CatalogResolver
from storefront.utils.logging import get_logger
from storefront.utils.settings import MAX_LINE_QUANTITY

logger = get_logger(__name__)


def _check_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity(quantity)
    if quantity > MAX_LINE_QUANTITY:
        raise InvalidQuantity(quantity, f"Quantity cannot exceed {MAX_LINE_QUANTITY}")
    return quantity


class CartService:
    """
    Use case'y dla koszyka uzytkownika (jeden koszyk na usera).
    commands (add, update, remove, clear) modyfikuja stan pod optimistic lockingiem
    query (get) tylko odczyt

    Linie trzymaja snapshot nazwy/ceny/obrazka z momentu dodania,
    pozniejsze zmiany w katalogu ich nie zmieniaja.
    """

    def __init__(self, db: Session, resolver: CatalogResolver | None = None):
        self.repo = CartRepo(db)
        self.resolver = resolver or CatalogResolver(db)

    #query - odczyt
    def to_dict(self, cart: CartModel) -> Dict[str, Any]:
        items = self.repo.get_cart_items(cart.id)
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "version": cart.version,
            "items": [
                {
                    "id": i.id,
                    "product_id": i.product_id,
                    "name": i.name,
                    "price": i.price,
                    "image": i.image,
                    "quantity": i.quantity,
                    "line_total": pricing.line_total(i.price, i.quantity),
                }
                for i in items
            ],
            "item_count": sum(i.quantity for i in items),
            "subtotal": pricing.subtotal(items),
            "updated_at": cart.updated_at,
        }

    def get_or_create(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        except IntegrityError:
            # rownolegle zadanie utworzylo koszyk pierwsze
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if cart is None:
                raise
            return cart

        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    def get_cart(self, user_id: str) -> Dict[str, Any]:
        return self.to_dict(self.get_or_create(user_id))

    #commands
    def add_item(self, user_id: str, reference, quantity: int = 1) -> Dict[str, Any]:
        _check_quantity(quantity)

        # blad rozwiazania produktu przerywa cala operacje, koszyk bez zmian
        product = self.resolver.resolve(reference)
        cart = self.get_or_create(user_id)

        existing = self.repo.get_cart_item(cart.id, product.id)
        if existing:
            _check_quantity(existing.quantity + quantity)
            logger.info(
                f"Product {product.id} already in cart {cart.id}, quantity "
                f"{existing.quantity} -> {existing.quantity + quantity}"
            )
            existing.quantity += quantity
        else:
            logger.info(f"Adding product {product.id} to cart {cart.id}")
            self.repo.add_cart_item(
                CartItemModel(
                    cart_id=cart.id,
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    image=product.image,
                    quantity=quantity,
                )
            )

        self._commit_version(cart)
        return self.get_cart(user_id)

    def update_quantity(
        self,
        user_id: str,
        line_id: int,
        quantity: int,
        expected_version: int | None = None,
    ) -> Dict[str, Any]:
        # ustawia dokladna ilosc, nie delta; usuniecie tylko przez remove_item
        _check_quantity(quantity)

        cart = self._require_cart(user_id)
        if expected_version is not None and expected_version != cart.version:
            raise CartConflict(cart.id)

        line = self.repo.get_line(cart.id, line_id)
        if not line:
            raise LineNotFound(line_id)

        line.quantity = quantity
        self._commit_version(cart)

        logger.info(f"Cart {cart.id} line {line_id} quantity set to {quantity}")
        return self.get_cart(user_id)

    def remove_item(self, user_id: str, line_id: int) -> Dict[str, Any]:
        cart = self._require_cart(user_id)

        # brak linii to nie blad (idempotentne)
        removed = self.repo.delete_line(cart.id, line_id)
        if not removed:
            self.repo.rollback()
            return self.get_cart(user_id)

        self._commit_version(cart)
        logger.info(f"Removed line {line_id} from cart {cart.id}")
        return self.get_cart(user_id)

    def clear(self, user_id: str) -> Dict[str, Any]:
        cart = self.get_or_create(user_id)

        removed = self.repo.delete_all_items(cart.id)
        if not removed:
            self.repo.rollback()
            return self.get_cart(user_id)

        self._commit_version(cart)
        logger.info(f"Cleared cart {cart.id} ({removed} lines)")
        return self.get_cart(user_id)

    def _require_cart(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise CartNotFound(user_id)
        return cart

    def _commit_version(self, cart: CartModel) -> None:
        """
        Optimistic locking na polu version.
        np. UPDATE carts SET version = 3 WHERE id = 1 AND version = 2
        """
        cart_id, version = cart.id, cart.version
        try:
            rowcount = self.repo.update_cart_version(cart_id, version)
        except IntegrityError:
            # np. rownolegle dodanie tego samego produktu (u_cart_product)
            self.repo.rollback()
            raise CartConflict(cart_id)

        if rowcount == 0:
            self.repo.rollback()
            logger.warning(f"Concurrent modification of cart {cart_id} (version {version})")
            raise CartConflict(cart_id)

        self.repo.commit()

